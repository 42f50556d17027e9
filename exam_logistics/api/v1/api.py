# exam_logistics/api/v1/api.py
from fastapi import APIRouter

from .routes import router as v1_routes_router

# Top-level router for the v1 API; the "/api/v1" prefix is applied in main.py
api_router = APIRouter()

api_router.include_router(v1_routes_router)
