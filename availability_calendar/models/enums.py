import enum


class MarkerState(str, enum.Enum):
    UNAVAILABLE = "unavailable"
    AVAILABLE = "available"

    @classmethod
    def from_fields(
        cls, is_unavailable: bool | None, is_available: bool | None
    ) -> "MarkerState":
        # legacy rows carry is_available=False instead of is_unavailable=True
        if is_unavailable is True or is_available is False:
            return cls.UNAVAILABLE
        return cls.AVAILABLE
