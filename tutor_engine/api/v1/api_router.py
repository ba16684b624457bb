from fastapi import APIRouter

from tutor_engine.api.v1.routers.tutor import router as tutor_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(tutor_router)
