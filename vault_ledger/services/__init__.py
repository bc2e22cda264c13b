"""Service modules"""
from .ledger import LedgerEngine

__all__ = ["LedgerEngine"]
