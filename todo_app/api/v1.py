# todo_app/api/v1.py

from fastapi import APIRouter

from todo_app.api.endpoints import status
from todo_app.modules.todos.routers import todos_router

api_router = APIRouter()

api_router.include_router(status.router)
api_router.include_router(todos_router, prefix="/todos")
