"""
Rental Kernel - shared infrastructure for the lease/payment lifecycle engine.

- Typed, coded exceptions
- Structured JSON logging
- Injectable clock and calendar helpers
- SQLAlchemy base, engine and unit of work
"""

__version__ = "0.1.0"
