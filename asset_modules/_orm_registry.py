"""
Module ORM Registry (``asset_modules._orm_registry``).

Responsibility
--------------
Ensure all module-level SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before tables are
created.  Called by ``asset_kernel.db.engine.create_tables()``.
"""


def import_all_orm_models() -> None:
    """Import every ``asset_modules.*.orm`` module to register ORM models.

    This function is idempotent -- repeated calls are harmless.
    """
    import asset_modules.registry.orm  # noqa: F401
