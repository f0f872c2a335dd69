from .confirmation import (CommitmentLevel, ConfirmationEvent,
                           ConfirmationEventType, ConfirmationStatus,
                           PendingConfirmation, SignatureStatus)
from .fees import (FEE_DENOMINATOR, PERCENT_TO_FEE_MULTIPLIER, AllocationQuery,
                   AllocationResult, Fees, PercentFee)
from .operation import (PROPOSAL_LIFECYCLE_OPERATIONS, OperationType,
                        get_operation_name, is_wrappable)
from .run import TranscriptEntry, TxContext
from .stage import (FAILURE_STAGES, CustomError, Stage, TransactionStatusInfo,
                    describe_stage)
from .transaction import (AccountMeta, Instruction, SignaturePair,
                          SignedTransaction, UnsignedTransaction)

__all__ = [
    "OperationType",
    "PROPOSAL_LIFECYCLE_OPERATIONS",
    "get_operation_name",
    "is_wrappable",
    "Stage",
    "FAILURE_STAGES",
    "describe_stage",
    "CustomError",
    "TransactionStatusInfo",
    "FEE_DENOMINATOR",
    "PERCENT_TO_FEE_MULTIPLIER",
    "PercentFee",
    "Fees",
    "AllocationQuery",
    "AllocationResult",
    "CommitmentLevel",
    "ConfirmationStatus",
    "SignatureStatus",
    "PendingConfirmation",
    "ConfirmationEventType",
    "ConfirmationEvent",
    "TxContext",
    "TranscriptEntry",
    "AccountMeta",
    "Instruction",
    "UnsignedTransaction",
    "SignaturePair",
    "SignedTransaction",
]
