from .allocation import solve_max_allocatable
from .preflight import check_balance, describe_shortfall
from .quoter import ConfigFeeQuoter, FeeQuoter, MockFeeQuoter

__all__ = [
    "solve_max_allocatable",
    "check_balance",
    "describe_shortfall",
    "FeeQuoter",
    "ConfigFeeQuoter",
    "MockFeeQuoter",
]
