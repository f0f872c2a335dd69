from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

from txflow.models import Instruction, OperationType, TxContext, UnsignedTransaction


class InstructionBuilder(ABC):
    @abstractmethod
    async def build(
        self, params: Dict[str, Any], context: TxContext
    ) -> Optional[UnsignedTransaction]:
        """
        Build the transaction of one operation.
        Return None when nothing could be built for the given params.
        """
        ...


class ProposalBuilder(ABC):
    @abstractmethod
    async def build_proposal(
        self,
        instruction: Instruction,
        expiry: datetime,
        operation_type: OperationType,
        context: TxContext,
    ) -> UnsignedTransaction:
        """
        Wrap a single instruction into a proposal of the multisig in context.
        The instruction's program id, accounts and data must be carried over unchanged.
        """
        ...
