from fastapi import APIRouter

from vacation_portal.api.me import me_router
from vacation_portal.api.requests import requests_router
from vacation_portal.api.users import users_router

api_router = APIRouter()
api_router.include_router(me_router)
api_router.include_router(users_router)
api_router.include_router(requests_router)
