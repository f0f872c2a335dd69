from fastapi import APIRouter, Body, HTTPException
from typing_extensions import Annotated

from txflow.models import AllocationQuery, AllocationResult

from ..depends import ServiceDep

router = APIRouter(prefix="/allocation")


@router.post("", response_model=AllocationResult)
async def solve_allocation(
    input: Annotated[AllocationQuery, Body()], *, service: ServiceDep
) -> AllocationResult:
    try:
        return service.solve_max_allocatable(
            input.pool_balance, input.percent_fee, input.recipients
        )
    except ValueError as e:
        raise HTTPException(400, detail=str(e))
