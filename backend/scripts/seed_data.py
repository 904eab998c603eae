"""Seed the database with sample hosts, renters, cars and bookings.

Listings are modelled on typical self-drive rentals in Indian metros, priced
per day in INR.

Run inside Docker:
    docker compose exec backend python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from app.auth.jwt import create_token_for_user
from app.database import async_session_factory, init_db
from app.models.booking import Booking
from app.models.car import Car
from app.models.favorite import Favorite
from app.models.payment import Payment
from app.models.review import Review
from app.models.user import User
from app.services.pricing import compute_breakdown, count_days

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

SEED_DOMAIN = "@driveshare.test"

USERS = [
    {"email": f"host{SEED_DOMAIN}", "name": "Priya Sharma", "phone": "+919800000001", "role": "user"},
    {"email": f"renter{SEED_DOMAIN}", "name": "Arjun Mehta", "phone": "+919800000002", "role": "user"},
    {"email": f"renter2{SEED_DOMAIN}", "name": "Kavya Iyer", "phone": "+919800000003", "role": "user"},
    {"email": f"admin{SEED_DOMAIN}", "name": "Ops Admin", "phone": None, "role": "admin"},
]

CARS = [
    {
        "make": "Maruti Suzuki",
        "model": "Swift",
        "year": 2022,
        "car_type": "hatchback",
        "transmission": "manual",
        "fuel_type": "petrol",
        "seats": 5,
        "daily_price": Decimal("1200.00"),
        "location": "Koramangala, Bengaluru",
        "description": "Zippy hatchback, ideal for city errands. Fastag and phone mount included.",
        "features": ["ac", "bluetooth", "fastag"],
        "status": "active",
    },
    {
        "make": "Hyundai",
        "model": "Creta",
        "year": 2023,
        "car_type": "suv",
        "transmission": "automatic",
        "fuel_type": "diesel",
        "seats": 5,
        "daily_price": Decimal("2800.00"),
        "location": "Indiranagar, Bengaluru",
        "description": "Comfortable SUV for weekend trips to Coorg or Chikmagalur.",
        "features": ["ac", "sunroof", "reverse_camera", "cruise_control"],
        "status": "active",
    },
    {
        "make": "Tata",
        "model": "Nexon EV",
        "year": 2023,
        "car_type": "suv",
        "transmission": "automatic",
        "fuel_type": "electric",
        "seats": 5,
        "daily_price": Decimal("2500.00"),
        "location": "Bandra, Mumbai",
        "description": "Electric SUV with about 300 km of real-world range. Home charger cable included.",
        "features": ["ac", "android_auto", "connected_car"],
        "status": "active",
    },
    {
        "make": "Mahindra",
        "model": "Thar",
        "year": 2021,
        "car_type": "suv",
        "transmission": "manual",
        "fuel_type": "diesel",
        "seats": 4,
        "daily_price": Decimal("3500.00"),
        "location": "Panjim, Goa",
        "description": "Convertible 4x4. Currently off the road for servicing.",
        "features": ["4x4", "convertible"],
        "status": "inactive",
    },
]


def _build_bookings(cars: list[Car], users: dict[str, User], today: date) -> list[dict]:
    """Bookings across past, present and future with no overlapping active ranges per car."""
    swift, creta, nexon, _ = cars
    renter = users["renter"]
    renter2 = users["renter2"]

    return [
        # Swift: a finished trip, a current one, and an upcoming one
        {"car": swift, "renter": renter, "start": today - timedelta(days=20), "end": today - timedelta(days=18),
         "status": "completed", "paid": True},
        {"car": swift, "renter": renter2, "start": today - timedelta(days=1), "end": today + timedelta(days=2),
         "status": "ongoing", "paid": True},
        {"car": swift, "renter": renter, "start": today + timedelta(days=10), "end": today + timedelta(days=12),
         "status": "pending", "paid": False},
        # Creta: confirmed weekend plus a cancelled request on overlapping dates
        {"car": creta, "renter": renter, "start": today + timedelta(days=5), "end": today + timedelta(days=7),
         "status": "confirmed", "paid": True},
        {"car": creta, "renter": renter2, "start": today + timedelta(days=6), "end": today + timedelta(days=8),
         "status": "cancelled", "paid": False},
        # Nexon EV: same-day rental next week
        {"car": nexon, "renter": renter2, "start": today + timedelta(days=7), "end": today + timedelta(days=7),
         "status": "pending", "paid": False},
    ]


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with sample marketplace data.

    Idempotent: deletes every user in the seed domain (and everything that
    references them) before re-creating the data set.
    """
    await init_db()

    async with async_session_factory() as session:
        result = await session.execute(select(User.id).where(User.email.endswith(SEED_DOMAIN)))
        existing_ids = [row[0] for row in result.all()]

        if existing_ids:
            print(f"⚠️  Found {len(existing_ids)} seed users. Deleting and re-seeding...")
            car_ids = select(Car.id).where(Car.owner_id.in_(existing_ids))
            booking_ids = select(Booking.id).where(Booking.car_id.in_(car_ids))
            await session.execute(delete(Payment).where(Payment.booking_id.in_(booking_ids)))
            await session.execute(delete(Review).where(Review.car_id.in_(car_ids)))
            await session.execute(delete(Favorite).where(Favorite.user_id.in_(existing_ids)))
            await session.execute(delete(Booking).where(Booking.car_id.in_(car_ids)))
            await session.execute(delete(Car).where(Car.owner_id.in_(existing_ids)))
            await session.execute(delete(User).where(User.id.in_(existing_ids)))
            await session.flush()

        # ------------------------------------------------------------------
        # 1. Users
        # ------------------------------------------------------------------
        users: dict[str, User] = {}
        for user_data in USERS:
            user = User(is_active=True, **user_data)
            session.add(user)
            users[user_data["email"].split("@")[0]] = user
        await session.flush()
        print(f"✅ Created {len(users)} users")

        # ------------------------------------------------------------------
        # 2. Cars (all hosted by the first user)
        # ------------------------------------------------------------------
        host = users["host"]
        cars: list[Car] = []
        for car_data in CARS:
            car = Car(owner_id=host.id, images=[], **car_data)
            session.add(car)
            cars.append(car)
            print(f"   🚗 {car_data['make']} {car_data['model']} - {car_data['location']} (₹{car_data['daily_price']}/day)")
        await session.flush()

        # ------------------------------------------------------------------
        # 3. Bookings, with a payment for each paid one
        # ------------------------------------------------------------------
        today = date.today()
        booking_count = 0
        payment_count = 0
        for bdata in _build_bookings(cars, users, today):
            car: Car = bdata["car"]
            breakdown = compute_breakdown(car.daily_price, count_days(bdata["start"], bdata["end"]))
            booking = Booking(
                car_id=car.id,
                renter_id=bdata["renter"].id,
                host_id=car.owner_id,
                start_date=bdata["start"],
                end_date=bdata["end"],
                pickup_time="10:00",
                return_time="10:00",
                total_days=breakdown.total_days,
                daily_rate=breakdown.daily_rate,
                subtotal=breakdown.subtotal,
                service_fee=breakdown.service_fee,
                insurance_fee=breakdown.insurance_fee,
                gst=breakdown.gst,
                discount=breakdown.discount,
                total_amount=breakdown.total_amount,
                status=bdata["status"],
                payment_status="paid" if bdata["paid"] else "pending",
            )
            session.add(booking)
            await session.flush()
            booking_count += 1

            if bdata["paid"]:
                session.add(
                    Payment(
                        booking_id=booking.id,
                        payer_id=booking.renter_id,
                        amount=booking.total_amount,
                        currency="INR",
                        payment_method="card",
                        status="success",
                        transaction_id=f"txn_seed_{booking.id.hex}",
                    )
                )
                payment_count += 1

            if bdata["status"] == "completed":
                session.add(
                    Review(
                        car_id=car.id,
                        booking_id=booking.id,
                        reviewer_id=booking.renter_id,
                        rating=5,
                        comment="Clean car and a smooth handover.",
                    )
                )
                car.rating = Decimal("5.00")
                car.total_reviews = 1

        session.add(Favorite(user_id=users["renter"].id, car_id=cars[1].id))
        await session.flush()
        await session.commit()

        print(f"✅ Created {booking_count} bookings and {payment_count} payments")
        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        for key, user in users.items():
            print(f"   {key:<8} {user.email}")
            print(f"            token: {create_token_for_user(user.id)}")
        print(f"   Cars:     {len(cars)}")
        print(f"   Bookings: {booking_count}")
        print("=" * 60)
        print("🎉 Done! Send a token as 'Authorization: Bearer <token>'.")


if __name__ == "__main__":
    asyncio.run(seed())
