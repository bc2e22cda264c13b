"""Ledger error codes and the tagged result returned by every operation."""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCode(IntEnum):
    """Stable numeric rejection codes."""

    NOT_AUTHORIZED = 200
    INSUFFICIENT_BALANCE = 201
    INVALID_AMOUNT = 202
    VAULT_NOT_FOUND = 203
    STRATEGY_NOT_FOUND = 204
    VAULT_PAUSED = 205
    MINIMUM_DEPOSIT_NOT_MET = 206
    WITHDRAWAL_TOO_LARGE = 207
    TRANSFER_FAILED = 208


class LedgerError(Exception):
    """Raised when an operation is rejected by a precondition."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = code
        super().__init__(message or code.name)


class TransferError(Exception):
    """Raised by an asset-transfer collaborator that could not move funds."""


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a ledger operation: either a value or an error code."""

    value: T | None = None
    error: ErrorCode | None = None

    @classmethod
    def ok(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def err(cls, code: ErrorCode) -> Result[T]:
        return cls(error=code)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, raising ``LedgerError`` if this is an error."""
        if self.error is not None:
            raise LedgerError(self.error)
        return self.value  # type: ignore[return-value]
