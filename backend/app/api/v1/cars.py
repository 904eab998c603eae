"""Car listings API routes: public browsing, host-managed CRUD, availability."""

import uuid
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db, get_optional_user
from app.models.car import Car
from app.models.user import User
from app.schemas.car import (
    BookedDatesResponse,
    CarCreate,
    CarListResponse,
    CarResponse,
    CarUpdate,
    Pagination,
    QuoteResponse,
)
from app.schemas.user import MessageResponse
from app.services import listing_service
from app.services.availability import list_booked_dates
from app.services.listing_service import CarFilters

router = APIRouter(prefix="/api/v1/cars", tags=["cars"])


@router.get(
    "",
    response_model=CarListResponse,
    summary="Browse and search car listings",
)
async def list_cars(
    search: str | None = Query(None, description="Matches make, model or location"),
    car_type: str | None = Query(None),
    transmission: str | None = Query(None),
    fuel_type: str | None = Query(None),
    location: str | None = Query(None),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    owner_id: uuid.UUID | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> CarListResponse:
    """Return a page of active listings. Hosts filtering by their own id also see inactive cars."""
    filters = CarFilters(
        search=search,
        car_type=car_type,
        transmission=transmission,
        fuel_type=fuel_type,
        location=location,
        min_price=min_price,
        max_price=max_price,
        owner_id=owner_id,
    )
    result = await listing_service.search_cars(db, filters, page=page, limit=limit, viewer=viewer)
    return CarListResponse(
        items=[CarResponse.model_validate(car) for car in result.items],
        pagination=Pagination(page=result.page, limit=result.limit, total=result.total, pages=result.pages),
    )


@router.post(
    "",
    response_model=CarResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List a new car",
)
async def create_car(
    body: CarCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> CarResponse:
    """Create a car owned by the authenticated user."""
    car = Car(owner_id=current_user.id, **body.model_dump())
    db.add(car)
    await db.flush()
    car = await listing_service.get_car(db, car.id)
    return CarResponse.model_validate(car)


@router.get(
    "/{car_id}",
    response_model=CarResponse,
    summary="Get a car by ID",
)
async def get_car(
    car_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> CarResponse:
    car = await listing_service.get_car(db, car_id)
    return CarResponse.model_validate(car)


@router.put(
    "/{car_id}",
    response_model=CarResponse,
    summary="Update a car listing",
)
async def update_car(
    car_id: uuid.UUID,
    body: CarUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> CarResponse:
    """Partially update a listing. Existing bookings keep their original price."""
    car = await listing_service.get_owned_car(db, car_id, current_user)

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(car, field, value)

    await db.flush()
    car = await listing_service.get_car(db, car_id)
    return CarResponse.model_validate(car)


@router.delete(
    "/{car_id}",
    response_model=MessageResponse,
    summary="Delete a car listing",
)
async def delete_car(
    car_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    """Delete a listing that has no bookings. Returns 409 otherwise."""
    await listing_service.delete_car(db, car_id, current_user)
    return MessageResponse(message="Car deleted")


@router.get(
    "/{car_id}/booked-dates",
    response_model=BookedDatesResponse,
    summary="Days on which the car is already booked",
)
async def get_booked_dates(
    car_id: str,
    db: AsyncSession = Depends(get_db),
) -> BookedDatesResponse:
    """Public endpoint used by the date picker.

    Unknown or malformed ids return an empty list rather than an error.
    """
    booked = await list_booked_dates(db, car_id)
    return BookedDatesResponse(booked_dates=booked.to_list())


@router.get(
    "/{car_id}/quote",
    response_model=QuoteResponse,
    summary="Price a prospective stay",
)
async def get_quote(
    car_id: uuid.UUID,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> QuoteResponse:
    breakdown, available = await listing_service.quote(db, car_id, start_date, end_date)
    return QuoteResponse(
        car_id=car_id,
        start_date=start_date,
        end_date=end_date,
        available=available,
        **breakdown.as_dict(),
    )
