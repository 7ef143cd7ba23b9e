"""
timeclock_config -- YAML-backed payroll configuration.

Architecture position:
    Configuration -- sits above ``timeclock_modules``.  The kernel and
    engines MUST NEVER import from ``timeclock_config``; they receive
    every setting as an explicit parameter.

Usage:
    from timeclock_config import load_payroll_config

    config = load_payroll_config("settings/payroll.yaml")
"""

from timeclock_config.loader import (
    compute_checksum,
    extract_payroll_settings,
    load_payroll_config,
    load_yaml_file,
)

__all__ = [
    "compute_checksum",
    "extract_payroll_settings",
    "load_payroll_config",
    "load_yaml_file",
]
