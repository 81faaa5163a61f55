"""
Pure domain layer.

Contains the injectable clock with NO dependencies on ORM, database or I/O.
"""

from asset_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
]
