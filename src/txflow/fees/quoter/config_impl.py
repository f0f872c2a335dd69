from txflow.config import FeeConfig
from txflow.models import Fees, OperationType, PercentFee

from .abc import FeeQuoter


class ConfigFeeQuoter(FeeQuoter):
    def __init__(self, fee_config: FeeConfig) -> None:
        self._config = fee_config

    async def get_fees(self, operation_type: OperationType) -> Fees:
        percent = self._config.percent_fee_overrides.get(
            operation_type.name, self._config.protocol_percent_fee
        )
        flat_fee = self._config.flat_fee_overrides.get(
            operation_type.name, self._config.protocol_flat_fee
        )
        return Fees(
            network_fee=self._config.network_fee,
            protocol_flat_fee=flat_fee,
            protocol_percent_fee=PercentFee.from_percent(percent),
        )
