from txflow.models import Fees


def check_balance(spendable_balance: int, fees: Fees) -> bool:
    # percent fees are charged on the moved amount, not on the payer,
    # they are bounded by the allocation solver instead
    return spendable_balance >= fees.network_fee + fees.protocol_flat_fee


def describe_shortfall(spendable_balance: int, fees: Fees) -> str:
    return (
        f"Not enough balance ({spendable_balance}) to pay for network fees "
        f"({fees.min_required})"
    )
