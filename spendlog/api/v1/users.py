"""User endpoints: the caller's own profile and admin-only account management."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from spendlog.api.v1.auth import get_current_user, get_user_store, require_roles
from spendlog.core.errors import NotFoundError
from spendlog.models import User
from spendlog.schemas.auth import (
    UserData,
    UserPublic,
    UserResponse,
    UsersData,
    UsersListResponse,
)
from spendlog.services.user_store import UserStore

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_user_or_404(store: UserStore, user_id: int) -> User:
    user = store.find_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found!")
    return user


@router.get("/me", response_model=UserResponse)
def get_me(current_user: Annotated[User, Depends(get_current_user)]) -> UserResponse:
    """Return the authenticated user's profile."""
    return UserResponse(data=UserData(user=UserPublic.model_validate(current_user)))


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[User, Depends(require_roles("admin"))],
    store: Annotated[UserStore, Depends(get_user_store)],
) -> UsersListResponse:
    """List all users (admin only)."""
    users = [UserPublic.model_validate(u) for u in store.list_users()]
    return UsersListResponse(results=len(users), data=UsersData(users=users))


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    _admin: Annotated[User, Depends(require_roles("admin"))],
    store: Annotated[UserStore, Depends(get_user_store)],
) -> UserResponse:
    """Fetch one user by id (admin only)."""
    user = _get_user_or_404(store, user_id)
    return UserResponse(data=UserData(user=UserPublic.model_validate(user)))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    admin: Annotated[User, Depends(require_roles("admin"))],
    store: Annotated[UserStore, Depends(get_user_store)],
) -> Response:
    """Delete a user and their expenses (admin only)."""
    user = _get_user_or_404(store, user_id)
    store.delete(user)
    logger.info("Admin id=%s deleted user id=%s", admin.id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
