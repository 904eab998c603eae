"""Favorites API router: cars saved by the current user."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db
from app.models.car import Car
from app.models.favorite import Favorite
from app.models.user import User
from app.schemas.review import FavoriteCreate, FavoriteResponse
from app.schemas.user import MessageResponse

router = APIRouter(prefix="/api/v1/favorites", tags=["favorites"])


@router.get(
    "",
    response_model=list[FavoriteResponse],
    summary="List the current user's favorite cars",
)
async def list_favorites(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[Favorite]:
    result = await db.execute(
        select(Favorite).where(Favorite.user_id == current_user.id).order_by(Favorite.created_at.desc())
    )
    return list(result.scalars().all())


@router.post(
    "",
    response_model=FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a car to favorites",
)
async def add_favorite(
    body: FavoriteCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Favorite:
    """Save a car. Raises 404 for an unknown car and 409 if it is already saved."""
    car_result = await db.execute(select(Car.id).where(Car.id == body.car_id))
    if car_result.scalar_one_or_none() is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Car not found",
        )

    existing = await db.execute(
        select(Favorite).where(Favorite.user_id == current_user.id, Favorite.car_id == body.car_id)
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Car is already in favorites",
        )

    favorite = Favorite(user_id=current_user.id, car_id=body.car_id)
    db.add(favorite)
    await db.flush()
    await db.refresh(favorite, attribute_names=["created_at", "car"])
    return favorite


@router.delete(
    "/{car_id}",
    response_model=MessageResponse,
    summary="Remove a car from favorites",
)
async def remove_favorite(
    car_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    result = await db.execute(
        select(Favorite).where(Favorite.user_id == current_user.id, Favorite.car_id == car_id)
    )
    favorite = result.scalar_one_or_none()
    if favorite is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Favorite not found",
        )

    await db.delete(favorite)
    await db.flush()
    return MessageResponse(message="Favorite removed")
