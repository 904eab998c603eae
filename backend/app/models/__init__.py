"""SQLAlchemy models for DriveShare.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from app.models.booking import Booking
from app.models.car import Car
from app.models.favorite import Favorite
from app.models.payment import Payment
from app.models.review import Review
from app.models.user import User

__all__ = [
    "Booking",
    "Car",
    "Favorite",
    "Payment",
    "Review",
    "User",
]
