from fastapi import APIRouter
from sqlbridge.api.endpoints import commands, databases, users

api_router = APIRouter()

# Combine all sub-routers into one
api_router.include_router(users.router)
api_router.include_router(databases.router)
api_router.include_router(commands.router)
