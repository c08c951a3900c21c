"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from expense_app.api.routes import expenses, categories, statuses, users

api_router = APIRouter()

# Include all route modules
api_router.include_router(expenses.router)
api_router.include_router(categories.router)
api_router.include_router(statuses.router)
api_router.include_router(users.router)
