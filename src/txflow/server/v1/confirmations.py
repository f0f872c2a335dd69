from typing import Any, List, Optional

from fastapi import APIRouter, Body, HTTPException
from pydantic import BaseModel
from typing_extensions import Annotated

from txflow.errors import ConfirmationError
from txflow.models import CommitmentLevel, OperationType, PendingConfirmation

from ..depends import ServiceDep
from .utils import CommonResponse

router = APIRouter(prefix="/confirmations")


class Confirmations(BaseModel):
    tracked: List[PendingConfirmation]
    history: List[PendingConfirmation]


@router.get("", response_model=Confirmations)
async def get_confirmations(*, service: ServiceDep) -> Confirmations:
    return Confirmations(
        tracked=service.watcher.tracked,
        history=await service.watcher.history(),
    )


class WatchInput(BaseModel):
    signature: str
    operation_type: OperationType
    finality: CommitmentLevel = CommitmentLevel.Confirmed
    extras: Optional[Any] = None


@router.post("", response_model=PendingConfirmation)
async def watch_confirmation(
    input: Annotated[WatchInput, Body()], *, service: ServiceDep
) -> PendingConfirmation:
    try:
        return await service.watch_confirmation(
            input.signature,
            input.operation_type,
            finality=input.finality,
            extras=input.extras,
        )
    except ConfirmationError as e:
        raise HTTPException(400, detail=e.msg)


@router.delete("", response_model=CommonResponse)
async def clear_confirmations(*, service: ServiceDep) -> CommonResponse:
    await service.clear_confirmation_history()
    return CommonResponse()
