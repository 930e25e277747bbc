from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import eventcheckin.models  # noqa: F401
from eventcheckin.core.security import create_access_token
from eventcheckin.db.session import Base, get_db
from eventcheckin.models.event import Event
from eventcheckin.models.inscription import Inscription
from eventcheckin.models.user import User
from eventcheckin.schemas.user import RoleEnum


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so several connections can race on the same data"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'checkin.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role: RoleEnum = RoleEnum.participant, full_name: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            full_name=full_name or f"User {counter['n']}",
            email=f"user{counter['n']}@example.com",
            hashed_password="not-a-real-hash",
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_event(db):
    def _make_event(title: str = "Robotics Workshop", is_active: bool = True) -> Event:
        event = Event(
            title=title,
            scheduled_at=datetime.now(timezone.utc) + timedelta(days=1),
            is_active=is_active,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event


@pytest.fixture
def inscribe(db):
    def _inscribe(user: User, event: Event) -> Inscription:
        inscription = Inscription(user_id=user.id, event_id=event.id)
        db.add(inscription)
        db.commit()
        return inscription

    return _inscribe


@pytest.fixture
def organizer(make_user):
    return make_user(RoleEnum.organizer, full_name="Olga Organizer")


@pytest.fixture
def client(session_factory):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}

    return _auth_headers
