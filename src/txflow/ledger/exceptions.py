from typing import List, Optional


class LedgerError(Exception):
    def __init__(
        self,
        method: str,
        message: str,
        code: Optional[int] = None,
        logs: Optional[List[str]] = None,
    ) -> None:
        self.method = method
        self.message = message
        self.code = code
        self.logs = logs or []

    def __str__(self) -> str:
        if self.code is not None:
            return f"Ledger {self.method} failed: {self.code} {self.message}"
        return f"Ledger {self.method} failed: {self.message}"
