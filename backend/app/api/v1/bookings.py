"""Bookings API router.

Access rule: a booking is visible to and mutable by its renter and its host
only. Business rules live in ``app.services.booking_service``; this module
maps HTTP to service calls.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_active_user, get_db
from app.models.booking import Booking
from app.models.user import User
from app.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingUpdate,
)
from app.services import booking_service

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Create a pending booking for the current user.

    Fails with:
    - 400 ``missing_field`` / ``invalid_operation`` (own car) / ``invalid_range``
    - 404 ``not_found`` when the car does not exist
    - 409 ``unavailable`` when the car is not active, ``conflict`` when the dates overlap
    - 422 ``price_mismatch`` when client pricing disagrees with the server
    """
    return await booking_service.create_booking(db, current_user, body)


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List the current user's bookings",
)
async def list_bookings(
    role: str = Query("renter", pattern="^(renter|host)$", description="renter: my trips, host: my cars"),
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> dict:
    items, total = await booking_service.list_bookings(
        db,
        current_user,
        role=role,
        status_filter=status_filter,
        skip=skip,
        limit=limit,
    )
    return {"items": items, "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Get booking detail",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    return await booking_service.get_booking_for_actor(db, booking_id, current_user)


@router.put(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Update a booking's status or handover times",
)
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Booking:
    """Apply a status transition and/or change pickup and return times.

    The host may confirm, start, complete or cancel; the renter may only
    cancel. Illegal transitions return 409 ``invalid_transition``.
    """
    return await booking_service.update_booking(db, booking_id, current_user, body)
