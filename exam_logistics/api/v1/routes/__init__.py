# exam_logistics/api/v1/routes/__init__.py
from fastapi import APIRouter
from .allocations import router as allocations_router

router = APIRouter()

router.include_router(
    allocations_router, prefix="/allocations", tags=["Allocation Engine"]
)
