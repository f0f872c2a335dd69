from decimal import Decimal

from txflow.config import FeeConfig
from txflow.fees import ConfigFeeQuoter
from txflow.models import OperationType


async def test_config_fee_quoter():
    config = FeeConfig(
        network_fee=5000,
        protocol_flat_fee=10,
        protocol_percent_fee=Decimal("0.25"),
        percent_fee_overrides={"StreamCreate": Decimal("0")},
        flat_fee_overrides={"TreasuryWithdraw": 20},
    )
    quoter = ConfigFeeQuoter(config)

    fees = await quoter.get_fees(OperationType.TreasuryWithdraw)
    assert fees.network_fee == 5000
    assert fees.protocol_flat_fee == 20
    assert fees.protocol_percent_fee.numerator == 2500
    assert fees.min_required == 5020

    fees = await quoter.get_fees(OperationType.StreamCreate)
    assert fees.protocol_flat_fee == 10
    assert fees.protocol_percent_fee.is_zero
