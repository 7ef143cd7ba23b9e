"""
Payroll Module (``timeclock_modules.payroll``).

Responsibility
--------------
Assembles a restaurant's pay period: per-employee line items, review
timecards, per-employee errors, period totals and the labor-cost view.

Architecture position
---------------------
**Modules layer** -- configuration schema, result models and the
``PayrollPeriodAssembler`` service.  All calculation lives in
``timeclock_engines``.
"""

from timeclock_modules.payroll.config import PayrollConfig
from timeclock_modules.payroll.models import (
    EmployeeError,
    EmployeePayrollInput,
    EmployeeTimecard,
    PayrollLineItem,
    PayrollPeriod,
    PayrollPeriodResult,
    PayrollTotals,
)
from timeclock_modules.payroll.service import PayrollPeriodAssembler

__all__ = [
    "EmployeeError",
    "EmployeePayrollInput",
    "EmployeeTimecard",
    "PayrollConfig",
    "PayrollLineItem",
    "PayrollPeriod",
    "PayrollPeriodAssembler",
    "PayrollPeriodResult",
    "PayrollTotals",
]
