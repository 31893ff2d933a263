"""
Main API v1 router.
"""

from fastapi import APIRouter
from productlookup.api.v1 import lookup

api_router = APIRouter()

api_router.include_router(
    lookup.router,
    prefix="/lookup",
    tags=["product-lookup"]
)
