from .context import TxRun
from .pipeline import TransactionPipeline
from .protocol_errors import match_protocol_error
from .stages import (STAGE_RULES, StageRule, is_valid_path,
                     is_valid_transition, next_stages)
from .status import StatusChannel
from .transcript import Transcript

__all__ = [
    "TransactionPipeline",
    "TxRun",
    "Transcript",
    "StatusChannel",
    "STAGE_RULES",
    "StageRule",
    "next_stages",
    "is_valid_transition",
    "is_valid_path",
    "match_protocol_error",
]
