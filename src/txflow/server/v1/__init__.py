from fastapi import APIRouter

from .allocation import router as allocation_router
from .confirmations import router as confirmations_router
from .transactions import router as transactions_router


router = APIRouter(prefix="/v1")
router.include_router(allocation_router)
router.include_router(confirmations_router)
router.include_router(transactions_router)
