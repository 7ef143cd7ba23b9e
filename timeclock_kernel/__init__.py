"""
Timeclock Kernel

The foundation layer of the time-clock payroll engine:
- Immutable punch, session and compensation value objects
- Integer-cent money arithmetic with explicit half-up rounding
- Typed, coded exception hierarchy
- Structured JSON logging with request-scoped context
"""

__version__ = "0.1.0"
