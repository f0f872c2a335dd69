from .connect import close, get_session, init, session_scope
from . import models

__all__ = ["init", "close", "get_session", "session_scope", "models"]
