"""
Asset Kernel

Shared foundation for the fixed-asset depreciation system:
- Typed, coded exceptions
- Structured JSON logging with context propagation
- Injectable clock
- SQLAlchemy declarative base and engine/session management
"""

__version__ = "0.1.0"
