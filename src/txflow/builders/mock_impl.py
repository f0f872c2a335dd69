from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from txflow.models import (AccountMeta, Instruction, OperationType, TxContext,
                           UnsignedTransaction)

from .abc import InstructionBuilder, ProposalBuilder

MOCK_PROGRAM_ID = "MockProgram1111111111111111111111111111111"
MOCK_MULTISIG_PROGRAM_ID = "MockMultisig111111111111111111111111111111"


class MockInstructionBuilder(InstructionBuilder):
    """
    Builds a single instruction transaction from ``params``.
    ``params["accounts"]`` is a list of pubkeys and ``params["data"]`` the raw
    instruction data. Set ``error`` to make every build raise, or ``empty``
    to make it return None.
    """

    def __init__(
        self,
        program_id: str = MOCK_PROGRAM_ID,
        error: Optional[Exception] = None,
        empty: bool = False,
        instructions: int = 1,
    ) -> None:
        self.program_id = program_id
        self.error = error
        self.empty = empty
        self.instructions = instructions
        self.calls: List[Tuple[Dict[str, Any], TxContext]] = []

    async def build(
        self, params: Dict[str, Any], context: TxContext
    ) -> Optional[UnsignedTransaction]:
        self.calls.append((params, context))
        if self.error is not None:
            raise self.error
        if self.empty:
            return None

        accounts = [
            AccountMeta(pubkey=context.authority, is_signer=True, is_writable=True)
        ]
        for pubkey in params.get("accounts", []):
            accounts.append(AccountMeta(pubkey=pubkey, is_writable=True))
        data = params.get("data", b"")
        if isinstance(data, str):
            data = data.encode("utf-8")

        return UnsignedTransaction(
            fee_payer=context.authority,
            instructions=[
                Instruction(program_id=self.program_id, accounts=accounts, data=data)
                for _ in range(self.instructions)
            ],
        )


class MockProposalBuilder(ProposalBuilder):
    def __init__(self, program_id: str = MOCK_MULTISIG_PROGRAM_ID) -> None:
        self.program_id = program_id
        self.calls: List[Tuple[Instruction, datetime, OperationType, TxContext]] = []

    async def build_proposal(
        self,
        instruction: Instruction,
        expiry: datetime,
        operation_type: OperationType,
        context: TxContext,
    ) -> UnsignedTransaction:
        self.calls.append((instruction, expiry, operation_type, context))
        assert context.multisig_id is not None

        create_proposal = Instruction(
            program_id=self.program_id,
            accounts=[
                AccountMeta(pubkey=context.multisig_id, is_writable=True),
                AccountMeta(pubkey=context.authority, is_signer=True, is_writable=True),
            ],
            data=f"{int(operation_type)}:{int(expiry.timestamp())}".encode("utf-8"),
        )
        # the wrapped instruction is carried as is
        return UnsignedTransaction(
            fee_payer=context.authority,
            instructions=[create_proposal, instruction],
        )
