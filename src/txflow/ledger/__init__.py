from .abc import Ledger
from .exceptions import LedgerError
from .mock_impl import MockLedger
from .web_impl import WebLedger

__all__ = ["Ledger", "LedgerError", "MockLedger", "WebLedger"]
