"""API routes for the FastAPI application."""

from fastapi import APIRouter

from meterline.api.v1.endpoints import usage

api_router = APIRouter()
api_router.include_router(usage.router, prefix="/usage", tags=["usage"])
