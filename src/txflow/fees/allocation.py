import logging

from txflow.models import AllocationResult, PercentFee

_logger = logging.getLogger(__name__)


def solve_max_allocatable(
    pool_balance: int, percent_fee: PercentFee, recipients: int = 1
) -> AllocationResult:
    """Largest amount that can be allocated out of ``pool_balance`` when the
    program charges ``percent_fee`` of the allocated amount from the same pool.

    The order of integer operations follows the program's own validation:
    the fee is derived from ``balance * d // (n + d)`` and the allocatable
    amount is ``balance - fee``. The intermediate quotient is never returned,
    it truncates differently and the program rejects it.

    When the allocation is split between several recipients the fee numerator
    is charged once per recipient.
    """
    if pool_balance < 0:
        raise ValueError(f"pool balance must not be negative, got {pool_balance}")
    if recipients < 1:
        raise ValueError(f"recipients must be at least 1, got {recipients}")

    if percent_fee.is_zero:
        return AllocationResult(max_allocatable=pool_balance, fee_amount=0)

    numerator = percent_fee.numerator
    denominator = percent_fee.denominator

    bad_max_allocation = pool_balance * denominator // (numerator + denominator)
    fee_amount = bad_max_allocation * (numerator * recipients) // denominator
    good_max_allocation = pool_balance - fee_amount

    _logger.debug(
        "allocation debug: balance %d, fee %d/%d x%d, bad max %d (remaining %d), "
        "fee %d, good max %d (remaining %d)",
        pool_balance,
        numerator,
        denominator,
        recipients,
        bad_max_allocation,
        pool_balance - bad_max_allocation - fee_amount,
        fee_amount,
        good_max_allocation,
        pool_balance - good_max_allocation - fee_amount,
    )

    return AllocationResult(
        max_allocatable=good_max_allocation, fee_amount=fee_amount
    )
