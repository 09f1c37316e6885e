"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import finalizer

api_router = APIRouter()

# Manual finalizer triggers, health
api_router.include_router(finalizer.router)
