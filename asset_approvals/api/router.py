from fastapi import APIRouter

from asset_approvals.api.approvals import approvals_router
from asset_approvals.api.asset_types import asset_types_router
from asset_approvals.api.requests import requests_router
from asset_approvals.api.users import users_router

api_router = APIRouter()
api_router.include_router(asset_types_router)
api_router.include_router(requests_router)
api_router.include_router(approvals_router)
api_router.include_router(users_router)
