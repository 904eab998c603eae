"""Current-user endpoint."""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_active_user
from app.models.user import User
from app.schemas.user import UserResponse

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me", response_model=UserResponse, summary="Get the authenticated user")
async def get_me(current_user: User = Depends(get_current_active_user)) -> User:
    return current_user
