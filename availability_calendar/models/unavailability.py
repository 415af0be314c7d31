from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint, or_
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .base import Base
from .enums import MarkerState
from .types import UTCDateTime


class UnavailabilityMarker(Base):
    """One user's declaration that they are unavailable on one calendar day.

    ``date`` is a plain ``YYYY-MM-DD`` string so that month ranges can be
    selected with lexical comparison. ``is_available`` only exists on rows
    written by the old schema, where ``False`` meant unavailable.
    """

    __tablename__ = "unavailability_markers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)

    is_unavailable: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_available: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, server_default=func.now())

    user: Mapped["User"] = relationship(
        "User", back_populates="unavailability_markers"
    )

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_unavailability_user_date"),
        Index("idx_unavailability_date", "date"),
    )

    @property
    def state(self) -> MarkerState:
        return MarkerState.from_fields(self.is_unavailable, self.is_available)

    @hybrid_property
    def effectively_unavailable(self) -> bool:
        return self.state is MarkerState.UNAVAILABLE

    @effectively_unavailable.inplace.expression
    @classmethod
    def _effectively_unavailable_expression(cls):
        return or_(cls.is_unavailable.is_(True), cls.is_available.is_(False))

    def mark_unavailable(self) -> None:
        self.is_unavailable = True
        self.is_available = None
