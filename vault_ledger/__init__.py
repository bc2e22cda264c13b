"""Yield-aggregation vault ledger."""
from .errors import ErrorCode, LedgerError, Result, TransferError
from .services import LedgerEngine

__all__ = ["ErrorCode", "LedgerEngine", "LedgerError", "Result", "TransferError"]
