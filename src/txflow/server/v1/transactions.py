from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException
from pydantic import BaseModel
from typing_extensions import Annotated

from txflow.errors import PipelineBusy, TxFlowError
from txflow.ledger import LedgerError
from txflow.models import (CustomError, OperationType, Stage, TranscriptEntry,
                           TxContext, get_operation_name)
from txflow.pipeline import TxRun

from ..depends import ServiceDep
from .utils import CommonResponse

router = APIRouter(prefix="/transactions")


class RunState(BaseModel):
    id: Optional[str] = None
    operation_type: Optional[OperationType] = None
    operation_name: str = ""
    busy: bool = False
    cancelled: bool = False
    last_operation: Stage = Stage.Idle
    current_operation: Stage = Stage.Idle
    custom_error: Optional[CustomError] = None
    signature: Optional[str] = None
    error: str = ""
    transcript: List[TranscriptEntry] = []


def _run_state(run: Optional[TxRun], busy: bool) -> RunState:
    if run is None:
        return RunState(busy=busy)
    return RunState(
        id=run.id,
        operation_type=run.operation_type,
        operation_name=get_operation_name(run.operation_type),
        busy=busy,
        cancelled=run.cancelled,
        last_operation=run.status.last_operation,
        current_operation=run.status.current_operation,
        custom_error=run.status.custom_error,
        signature=run.signature,
        error=str(run.error) if run.error is not None else "",
        transcript=list(run.transcript.entries),
    )


@router.get("", response_model=RunState)
async def get_transaction(*, service: ServiceDep) -> RunState:
    return _run_state(service.current_run(), service.pipeline.busy)


class RunInput(BaseModel):
    operation_type: OperationType
    params: Dict[str, Any] = {}
    context: TxContext


@router.post("", response_model=RunState)
async def start_transaction(
    input: Annotated[RunInput, Body()], *, service: ServiceDep
) -> RunState:
    try:
        run = await service.submit(input.operation_type, input.params, input.context)
    except PipelineBusy as e:
        raise HTTPException(409, detail=e.msg)
    except TxFlowError as e:
        raise HTTPException(400, detail=e.msg)
    except LedgerError as e:
        raise HTTPException(502, detail=str(e))
    return _run_state(run, True)


@router.post("/cancel", response_model=CommonResponse)
async def cancel_transaction(*, service: ServiceDep) -> CommonResponse:
    if service.cancel():
        return CommonResponse()
    return CommonResponse(success=False, message="No transaction in progress")
