"""
Configuration Loader (``timeclock_config.loader``).

Responsibility
--------------
Loads a payroll settings YAML file and turns it into a validated
``PayrollConfig``.  The file may hold the settings at the top level or
under a ``payroll:`` key, so it can share a file with other settings.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Sits above
``timeclock_modules``; the kernel and engines never import it.

Invariants enforced
-------------------
* YAML is parsed with ``yaml.safe_load`` only.
* No silent defaults for required fields: a missing
  ``reference_timezone`` is a ``ConfigurationError``.
* ``compute_checksum`` is deterministic for identical settings,
  regardless of key order or formatting in the file.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Not a mapping, unknown key or invalid value  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from timeclock_kernel.exceptions import ConfigurationError
from timeclock_kernel.logging_config import get_logger
from timeclock_modules.payroll.config import PayrollConfig

logger = get_logger("config.loader")

PAYROLL_SECTION = "payroll"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), type(data).__name__, "document must be a mapping")
    return data


def extract_payroll_settings(data: dict[str, Any]) -> dict[str, Any]:
    """Return the ``payroll:`` section if present, else the whole mapping."""
    if PAYROLL_SECTION not in data:
        return data
    section = data[PAYROLL_SECTION]
    if not isinstance(section, dict):
        raise ConfigurationError(PAYROLL_SECTION, section, "must be a mapping")
    return section


def load_payroll_config(path: Path | str) -> PayrollConfig:
    """Load and validate payroll settings from ``path``."""
    path = Path(path)
    settings = extract_payroll_settings(load_yaml_file(path))
    config = PayrollConfig.from_dict(settings)
    logger.info(
        "payroll_config_loaded",
        extra={"path": str(path), "checksum": compute_checksum(path)},
    )
    return config


def compute_checksum(path: Path | str) -> str:
    """
    SHA-256 of the canonical JSON form of the file's payroll settings.

    Identical settings always produce identical checksums, whatever the
    key order or whitespace in the YAML.
    """
    settings = extract_payroll_settings(load_yaml_file(Path(path)))
    canonical = json.dumps(settings, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
