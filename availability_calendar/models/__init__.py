from .auth import RefreshToken
from .base import Base
from .enums import MarkerState
from .unavailability import UnavailabilityMarker
from .user import User

__all__ = [
    "Base",
    "User",
    "RefreshToken",
    "MarkerState",
    "UnavailabilityMarker",
]
