"""
ORM model registry.

Imports every module's ORM classes so they register on ``Base.metadata``
before ``create_all`` or mapper configuration runs.
"""

from rental_kernel.logging_config import get_logger

logger = get_logger("modules.orm_registry")


def import_all_orm_models() -> None:
    import rental_modules.units.orm  # noqa: F401
    import rental_modules.tenants.orm  # noqa: F401
    import rental_modules.leases.orm  # noqa: F401
    import rental_modules.payments.orm  # noqa: F401

    logger.debug("orm_models_imported")
