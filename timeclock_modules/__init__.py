"""
Timeclock Modules.

Thin orchestration layers over the timeclock kernel and engines.
Each module contains:
- Domain models (inputs and results)
- Configuration schemas (policy and settings)
- A service facade that runs the engines

Modules:
- Payroll: period assembly of line items, timecards and labor cost
"""
