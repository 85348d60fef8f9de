"""
rental_config -- single public entrypoint for engine configuration.

Responsibility:
    ``get_active_config()`` is the only way runtime code obtains settings.
    Services never read YAML files or environment variables themselves;
    they receive ``LeaseConfig`` / ``PaymentConfig`` built by
    ``rental_config.bridges``.

Architecture position:
    Configuration.  Sits above ``rental_kernel`` and beside
    ``rental_modules``; the kernel never imports from ``rental_config``.

Resolution order:
    1. ``path`` argument.
    2. ``RENTAL_CONFIG_PATH`` environment variable.
    3. The bundled ``rental_config/sets/default.yaml``.
    ``DATABASE_URL``, when set, overrides ``database.url``.

Failure modes:
    - ``FileNotFoundError`` -- the resolved file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful call emits a ``RENTAL_CONFIG_TRACE`` log entry with
    the config id, version, checksum and source path.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from rental_config.loader import load_yaml_file, parse_configuration, validate_configuration
from rental_config.schema import (
    DatabaseDef,
    EngineConfiguration,
    LeasePolicyDef,
    PaymentPolicyDef,
    SchedulerDef,
)

_logger = logging.getLogger("rental_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

CONFIG_PATH_ENV = "RENTAL_CONFIG_PATH"
DATABASE_URL_ENV = "DATABASE_URL"


def get_active_config(path: Path | str | None = None) -> EngineConfiguration:
    """The ONLY public configuration entrypoint.

    Guarantees:
        - The returned configuration has passed validation.
        - A ``RENTAL_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Non-goals:
        - Does NOT cache; callers hold the returned object.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ValueError: If validation fails.
    """
    source = Path(path or os.environ.get(CONFIG_PATH_ENV) or _DEFAULT_CONFIG_PATH)
    config = parse_configuration(load_yaml_file(source))

    database_url = os.environ.get(DATABASE_URL_ENV)
    if database_url:
        config = replace(config, database=replace(config.database, url=database_url))

    errors = validate_configuration(config)
    if errors:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    _logger.info(
        "RENTAL_CONFIG_TRACE",
        extra={
            "trace_type": "RENTAL_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "source": str(source),
            "database_url_overridden": bool(database_url),
        },
    )
    return config


__all__ = [
    "DatabaseDef",
    "EngineConfiguration",
    "LeasePolicyDef",
    "PaymentPolicyDef",
    "SchedulerDef",
    "get_active_config",
]
