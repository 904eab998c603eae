"""Reviews API router."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db
from app.models.review import Review
from app.models.user import User
from app.schemas.review import ReviewCreate, ReviewResponse
from app.services import review_service

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])


@router.get(
    "",
    response_model=list[ReviewResponse],
    summary="List reviews of a car",
)
async def list_reviews(
    car_id: uuid.UUID = Query(..., description="Car to list reviews for"),
    db: AsyncSession = Depends(get_db),
) -> list[Review]:
    return await review_service.list_reviews(db, car_id)


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a car after a completed booking",
)
async def create_review(
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Review:
    """One review per car per renter; updates the car's average rating."""
    return await review_service.create_review(db, current_user, body)
