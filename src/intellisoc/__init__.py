"""IntelliSOC - authentication attempt, telemetry and IP reputation ledger."""

__version__ = "0.1.0"
__author__ = "IntelliSOC Team"
