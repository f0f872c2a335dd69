from decimal import Decimal
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

# fee percentages are sent to the program as parts per million
FEE_DENOMINATOR = 1_000_000
# converts a percent value (0.25 means 0.25 %) into parts per million
PERCENT_TO_FEE_MULTIPLIER = 10_000


class PercentFee(BaseModel):
    model_config = ConfigDict(frozen=True)

    numerator: int = Field(ge=0)
    denominator: int = Field(default=FEE_DENOMINATOR, gt=0)

    @classmethod
    def from_percent(cls, percent: Union[Decimal, int, str]) -> "PercentFee":
        value = Decimal(percent) * PERCENT_TO_FEE_MULTIPLIER
        if value != value.to_integral_value():
            raise ValueError(
                f"percent fee {percent} is finer than 1/{FEE_DENOMINATOR}"
            )
        return cls(numerator=int(value), denominator=FEE_DENOMINATOR)

    @property
    def is_zero(self) -> bool:
        return self.numerator == 0


class Fees(BaseModel):
    model_config = ConfigDict(frozen=True)

    network_fee: int = Field(ge=0)
    protocol_flat_fee: int = Field(default=0, ge=0)
    protocol_percent_fee: PercentFee = PercentFee(numerator=0)

    @property
    def min_required(self) -> int:
        return self.network_fee + self.protocol_flat_fee


class AllocationQuery(BaseModel):
    pool_balance: int = Field(ge=0)
    percent_fee: PercentFee
    recipients: int = Field(default=1, ge=1)


class AllocationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_allocatable: int
    fee_amount: int
