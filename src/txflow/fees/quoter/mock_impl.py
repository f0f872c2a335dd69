from typing import Dict, List, Optional

from txflow.models import Fees, OperationType

from .abc import FeeQuoter


class MockFeeQuoter(FeeQuoter):
    def __init__(
        self,
        fees: Fees,
        overrides: Optional[Dict[OperationType, Fees]] = None,
    ) -> None:
        self.fees = fees
        self.overrides = overrides or {}
        self.quoted: List[OperationType] = []

    async def get_fees(self, operation_type: OperationType) -> Fees:
        self.quoted.append(operation_type)
        return self.overrides.get(operation_type, self.fees)
