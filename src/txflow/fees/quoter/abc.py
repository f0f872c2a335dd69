from abc import ABC, abstractmethod

from txflow.models import Fees, OperationType


class FeeQuoter(ABC):
    @abstractmethod
    async def get_fees(self, operation_type: OperationType) -> Fees: ...
