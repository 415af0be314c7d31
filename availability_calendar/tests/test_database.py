import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from availability_calendar.models import Base, MarkerState, UnavailabilityMarker, User


@pytest.fixture(scope="function")
def db_session():
    engine = create_engine("sqlite:///:memory:", echo=False)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    session = SessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user(db_session):
    user = User(
        display_name="calendaruser",
        email="calendar@example.com",
        password_hash="hashed_password"
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


class TestDatabaseModels:

    def test_create_user(self, db_session, user):
        assert user.id is not None
        assert user.is_active is True
        assert user.created_at is not None
        assert user.created_at.tzinfo is not None

    def test_marker_belongs_to_user(self, db_session, user):
        db_session.add(UnavailabilityMarker(user_id=user.id, date="2024-03-15", is_unavailable=True))
        db_session.commit()

        result = db_session.execute(select(User).where(User.id == user.id))
        loaded = result.scalar_one()

        assert len(loaded.unavailability_markers) == 1
        assert loaded.unavailability_markers[0].user.display_name == "calendaruser"

    def test_one_marker_per_user_and_date(self, db_session, user):
        db_session.add(UnavailabilityMarker(user_id=user.id, date="2024-03-15", is_unavailable=True))
        db_session.commit()

        db_session.add(UnavailabilityMarker(user_id=user.id, date="2024-03-15", is_unavailable=True))
        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_effectively_unavailable_query_includes_legacy_rows(self, db_session, user):
        db_session.add_all([
            UnavailabilityMarker(user_id=user.id, date="2024-03-01", is_unavailable=True),
            UnavailabilityMarker(user_id=user.id, date="2024-03-02", is_available=False),
            UnavailabilityMarker(user_id=user.id, date="2024-03-03", is_available=True),
            UnavailabilityMarker(user_id=user.id, date="2024-03-04"),
        ])
        db_session.commit()

        result = db_session.execute(
            select(UnavailabilityMarker.date)
            .where(UnavailabilityMarker.effectively_unavailable)
            .order_by(UnavailabilityMarker.date)
        )

        assert list(result.scalars()) == ["2024-03-01", "2024-03-02"]

    def test_mark_unavailable_clears_legacy_field(self, db_session, user):
        marker = UnavailabilityMarker(user_id=user.id, date="2024-03-03", is_available=True)
        assert marker.effectively_unavailable is False

        marker.mark_unavailable()

        assert marker.is_unavailable is True
        assert marker.is_available is None
        assert marker.effectively_unavailable is True


class TestMarkerState:

    @pytest.mark.parametrize(
        "is_unavailable, is_available, expected",
        [
            (True, None, MarkerState.UNAVAILABLE),
            (None, False, MarkerState.UNAVAILABLE),
            (True, True, MarkerState.UNAVAILABLE),
            (None, True, MarkerState.AVAILABLE),
            (None, None, MarkerState.AVAILABLE),
            (False, None, MarkerState.AVAILABLE),
        ],
    )
    def test_from_fields(self, is_unavailable, is_available, expected):
        assert MarkerState.from_fields(is_unavailable, is_available) is expected
