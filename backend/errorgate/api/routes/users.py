"""User Routes: registration and lookup.

Invariants:
    - Routes never build error responses themselves: services raise Failures,
      ErrorDispatchMiddleware turns them into JSON bodies
    - Duplicate email → 409, unknown id → 404, bad input → 400 with fieldErrors
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from errorgate.schemas.user import UserCreate, UserResponse
from errorgate.services.user_directory import User, UserDirectory

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


def get_user_directory(request: Request) -> UserDirectory:
    return request.app.state.user_directory


def _to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id, email=user.email, name=user.name,
        created_at=user.created_at,
    )


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def register_user(
    body: UserCreate, directory: UserDirectory = Depends(get_user_directory),
):
    """Register a new user."""
    return _to_response(directory.register(body.email, body.name))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID, directory: UserDirectory = Depends(get_user_directory),
):
    """Fetch one user by id."""
    return _to_response(directory.get(user_id))
