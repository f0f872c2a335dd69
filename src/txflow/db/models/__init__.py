from .base import Base, BaseMixin
from .confirmation import Confirmation

__all__ = ["Base", "BaseMixin", "Confirmation"]
