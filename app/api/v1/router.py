from fastapi import APIRouter

from app.api.routers import activities, animals, auth, farms, roles, tasks, users

api_router = APIRouter()

api_router.include_router(roles.router)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(farms.router)
api_router.include_router(animals.router)
api_router.include_router(tasks.router)
api_router.include_router(activities.router)
