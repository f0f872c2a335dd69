from .abc import Signer
from .local_impl import LocalSigner
from .mock_impl import MockSigner

__all__ = ["Signer", "LocalSigner", "MockSigner"]
