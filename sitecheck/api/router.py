"""
API router aggregating all endpoints.
"""
from fastapi import APIRouter

from sitecheck.api.check import router as check_router
from sitecheck.api.downloads import router as downloads_router

api_router = APIRouter()

api_router.include_router(check_router)
api_router.include_router(downloads_router)
