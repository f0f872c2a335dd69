from fastapi import Depends
from typing_extensions import Annotated

from txflow.service import TxService, get_service

__all__ = ["ServiceDep"]


async def _get_service():
    return get_service()


ServiceDep = Annotated[TxService, Depends(_get_service)]
