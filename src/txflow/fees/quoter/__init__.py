from .abc import FeeQuoter
from .config_impl import ConfigFeeQuoter
from .mock_impl import MockFeeQuoter

__all__ = [
    "FeeQuoter",
    "ConfigFeeQuoter",
    "MockFeeQuoter",
]
