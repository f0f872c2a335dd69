from enum import IntEnum


class OperationType(IntEnum):
    Transfer = 1
    TransferTokens = 2
    CreateMint = 3
    MintTokens = 4
    SetMintAuthority = 5
    CreateAsset = 6
    DeleteAsset = 7
    SetAssetAuthority = 8
    CloseTokenAccount = 9
    Wrap = 10
    Unwrap = 11

    StreamCreate = 20
    StreamCreateWithTemplate = 21
    StreamClose = 22
    StreamAddFunds = 23
    StreamPause = 24
    StreamResume = 25
    StreamWithdraw = 26
    StreamTransferBeneficiary = 27

    TreasuryCreate = 40
    TreasuryStreamCreate = 41
    TreasuryClose = 42
    TreasuryAddFunds = 43
    TreasuryWithdraw = 44
    TreasuryRefreshBalance = 45
    TreasuryEdit = 46

    UpgradeProgram = 60
    UpgradeIDL = 61
    SetMultisigAuthority = 62

    EditMultisig = 80
    CreateMultisig = 81
    CreateVault = 82
    DeleteVault = 83
    SetVaultAuthority = 84
    ApproveTransaction = 85
    RejectTransaction = 86
    ExecuteTransaction = 87
    CancelTransaction = 88


# operations acting on the multisig itself, they are sent directly by a signer
# of the multisig and never wrapped into a proposal
PROPOSAL_LIFECYCLE_OPERATIONS = frozenset(
    [
        OperationType.CreateMultisig,
        OperationType.ApproveTransaction,
        OperationType.RejectTransaction,
        OperationType.ExecuteTransaction,
        OperationType.CancelTransaction,
    ]
)


_operation_names = {
    OperationType.Transfer: "Transfer",
    OperationType.TransferTokens: "Transfer tokens",
    OperationType.CreateMint: "Create mint",
    OperationType.MintTokens: "Mint token",
    OperationType.SetMintAuthority: "Change mint authority",
    OperationType.CreateAsset: "Create asset",
    OperationType.DeleteAsset: "Close asset",
    OperationType.SetAssetAuthority: "Change asset authority",
    OperationType.CloseTokenAccount: "Close token account",
    OperationType.Wrap: "Wrap",
    OperationType.Unwrap: "Unwrap",
    OperationType.StreamCreate: "Create stream",
    OperationType.StreamCreateWithTemplate: "Create stream with template",
    OperationType.StreamClose: "Close stream",
    OperationType.StreamAddFunds: "Top up stream",
    OperationType.StreamPause: "Pause stream",
    OperationType.StreamResume: "Resume stream",
    OperationType.StreamWithdraw: "Withdraw stream funds",
    OperationType.StreamTransferBeneficiary: "Transfer stream beneficiary",
    OperationType.TreasuryCreate: "Create treasury",
    OperationType.TreasuryStreamCreate: "Create treasury stream",
    OperationType.TreasuryClose: "Close treasury",
    OperationType.TreasuryAddFunds: "Add treasury funds",
    OperationType.TreasuryWithdraw: "Withdraw treasury funds",
    OperationType.TreasuryRefreshBalance: "Refresh treasury data",
    OperationType.TreasuryEdit: "Edit treasury",
    OperationType.UpgradeProgram: "Upgrade program",
    OperationType.UpgradeIDL: "Upgrade IDL",
    OperationType.SetMultisigAuthority: "Set multisig authority",
    OperationType.EditMultisig: "Edit multisig",
    OperationType.CreateMultisig: "Create multisig",
    OperationType.CreateVault: "Create vault",
    OperationType.DeleteVault: "Delete vault",
    OperationType.SetVaultAuthority: "Change vault authority",
    OperationType.ApproveTransaction: "Approve proposal",
    OperationType.RejectTransaction: "Reject proposal",
    OperationType.ExecuteTransaction: "Execute proposal",
    OperationType.CancelTransaction: "Cancel proposal",
}


def get_operation_name(op: OperationType) -> str:
    return _operation_names.get(op, op.name)


def is_wrappable(op: OperationType) -> bool:
    return op not in PROPOSAL_LIFECYCLE_OPERATIONS
