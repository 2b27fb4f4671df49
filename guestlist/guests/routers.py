from fastapi import APIRouter

from .features.bulk_operations.router import router as bulk_operations_router
from .features.guest_history.router import router as guest_history_router
from .features.list_guests.router import router as list_guests_router
from .features.manage_guests.router import router as manage_guests_router

router = APIRouter()

# Static paths (history, stats, bulk) must be registered before /{guest_id}.
router.include_router(guest_history_router)
router.include_router(bulk_operations_router)
router.include_router(list_guests_router)
router.include_router(manage_guests_router)
