"""
Configuration Loader (``rental_config.loader``).

Responsibility
--------------
Reads a YAML configuration set and parses it into the frozen
``rental_config.schema`` types.  Runtime callers go through
``rental_config.get_active_config()``; this module is its internals.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Omitted settings take the schema defaults; unknown keys are rejected.
* ``compute_checksum`` is a deterministic SHA-256 over the parsed data.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or out-of-range values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from rental_config.schema import (
    DatabaseDef,
    EngineConfiguration,
    LeasePolicyDef,
    PaymentPolicyDef,
    SchedulerDef,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _parse_section(cls, data: dict[str, Any] | None, section: str):
    data = data or {}
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown keys in '{section}': {', '.join(unknown)}")
    return cls(**data)


def parse_configuration(data: dict[str, Any]) -> EngineConfiguration:
    """Parse a configuration dict; ``checksum`` is computed over ``data``."""
    return EngineConfiguration(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        lease=_parse_section(LeasePolicyDef, data.get("lease"), "lease"),
        payment=_parse_section(PaymentPolicyDef, data.get("payment"), "payment"),
        scheduler=_parse_section(SchedulerDef, data.get("scheduler"), "scheduler"),
        database=_parse_section(DatabaseDef, data.get("database"), "database"),
        checksum=compute_checksum(data),
    )


def validate_configuration(config: EngineConfiguration) -> list[str]:
    """Return a list of validation errors (empty when valid)."""
    errors = []
    lease = config.lease
    if lease.contract_length_months <= 0:
        errors.append("lease.contract_length_months must be positive")
    elif lease.adjustment_cadence_months % lease.contract_length_months != 0:
        errors.append(
            "lease.adjustment_cadence_months must be a multiple of "
            "lease.contract_length_months"
        )
    if lease.expiring_soon_days <= 0:
        errors.append("lease.expiring_soon_days must be positive")
    if not 1 <= lease.max_painting_fee_installments <= 4:
        errors.append("lease.max_painting_fee_installments must be between 1 and 4")
    if config.payment.proration_day_basis <= 0:
        errors.append("payment.proration_day_basis must be positive")
    if config.payment.upcoming_default_days <= 0:
        errors.append("payment.upcoming_default_days must be positive")
    if config.payment.rent_payments_per_contract <= 0:
        errors.append("payment.rent_payments_per_contract must be positive")
    if not config.database.url:
        errors.append("database.url must not be empty")
    return errors


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
