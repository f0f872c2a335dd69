import re
from typing import List, Optional

from txflow.errors import CustomProtocolError
from txflow.models import OperationType

_anchor_error_pattern = re.compile(r'Program logged: "AnchorError(.*)Error Message: (.*)"')
_insufficient_lamports_pattern = re.compile(r"\b0x1\b")

_stream_create_operations = frozenset(
    [
        OperationType.StreamCreate,
        OperationType.TreasuryStreamCreate,
        OperationType.StreamCreateWithTemplate,
    ]
)


def _pick_account(accounts: List[str], index: int) -> str:
    if index < len(accounts):
        return accounts[index]
    return "-"


def _pool_fee_account_index(operation_type: OperationType) -> int:
    if operation_type == OperationType.StreamClose:
        return 5
    if operation_type in _stream_create_operations:
        return 2
    return 3


def _pool_balance_account_index(operation_type: OperationType) -> int:
    if operation_type in _stream_create_operations:
        return 2
    if operation_type == OperationType.TreasuryWithdraw:
        return 5
    return 3


def _lamports_account_index(operation_type: OperationType) -> int:
    if operation_type in (OperationType.Transfer, OperationType.TransferTokens):
        return 0
    return 3


def match_protocol_error(
    error_text: str,
    operation_type: OperationType,
    accounts: List[str],
    authority: Optional[str] = None,
) -> Optional[CustomProtocolError]:
    """
    Map a submission error to a user facing error.

    ``accounts`` is the account list of the operation's instruction, the
    offending account is picked from it by position. ``authority`` is the
    account reported when the error concerns the acting wallet or multisig.
    Return None when the error is not recognized.
    """
    if "0x1794" in error_text:
        return CustomProtocolError(
            title="Insufficient balance",
            message=(
                "Your transaction failed to submit due to there not being enough "
                "balance to cover the fees. Please fund the treasury and then "
                "retry this operation.\n\nTreasury ID: "
            ),
            data=_pick_account(accounts, _pool_fee_account_index(operation_type)),
        )
    if "0x1797" in error_text:
        return CustomProtocolError(
            title="Insufficient balance",
            message=(
                "Your transaction failed to submit due to insufficient balance in "
                "the treasury. Please add funds to the treasury and then retry "
                "this operation.\n\nTreasury ID: "
            ),
            data=_pick_account(accounts, _pool_balance_account_index(operation_type)),
        )
    if "0x1786" in error_text:
        return CustomProtocolError(
            message=(
                "Your transaction failed to submit due to Invalid Gateway Token. "
                "Please activate the Gateway Token and retry this operation."
            ),
        )
    if "0xbc4" in error_text:
        return CustomProtocolError(
            message=(
                "Your transaction failed to submit due to Account Not Initialized. "
                "Please initialize and fund the token accounts and retry this "
                "operation.\n"
            ),
            data=authority,
        )

    m = _anchor_error_pattern.search(error_text)
    if m is not None:
        return CustomProtocolError(message=m.group(2))

    if _insufficient_lamports_pattern.search(error_text) is not None:
        data = authority
        if data is None:
            data = _pick_account(accounts, _lamports_account_index(operation_type))
        return CustomProtocolError(
            title="Insufficient balance",
            message=(
                "Your transaction failed to submit due to insufficient balance. "
                "Please add funds and then retry this operation.\n\nAccount: "
            ),
            data=data,
        )

    return None
