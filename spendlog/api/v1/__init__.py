"""API v1 routes."""

from fastapi import APIRouter

from spendlog.api.v1 import auth, expenses, health, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/user", tags=["user"])
router.include_router(expenses.router, prefix="/expense", tags=["expense"])
