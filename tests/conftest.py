"""Shared pytest fixtures for the factures dashboard tests."""
from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from btp_dashboard.core.database import get_db_session
from btp_dashboard.core.identity import UserContext
from btp_dashboard.db.base import Base
from btp_dashboard.db.models import Facture, User
from btp_dashboard.main import create_app
from btp_dashboard.utils.security import hash_password

USER_PASSWORD = "chantier-2024"
FAST_HASH_METHOD = "pbkdf2:sha256:1000"


@pytest.fixture()
def engine() -> Generator:
    engine = create_engine(
        "sqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, class_=Session, autoflush=False, autocommit=False)


@pytest.fixture()
def session(session_factory) -> Generator[Session, None, None]:
    db_session = session_factory()
    try:
        yield db_session
    finally:
        db_session.close()


@pytest.fixture()
def user(session: Session) -> User:
    user = User(email="chef@chantier.fr", password_hash=hash_password(USER_PASSWORD, method=FAST_HASH_METHOD))
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture()
def owner(user: User) -> UserContext:
    return UserContext(user_id=str(user.id), email=user.email)


@pytest.fixture()
def make_facture(session: Session, user: User) -> Callable[..., Facture]:
    counter = iter(range(1, 10_000))

    def _make(**overrides: object) -> Facture:
        number = next(counter)
        data: dict[str, object] = {
            "user_id": user.id,
            "nfacture": f"F-{number:04d}",
            "date_facture": date(2024, 3, 15),
            "description": "Béton C25/30",
            "quantite": Decimal("2"),
            "montant_total": Decimal("100.00"),
            "importe": False,
        }
        data.update(overrides)
        facture = Facture(**data)
        session.add(facture)
        session.commit()
        session.refresh(facture)
        return facture

    return _make


@pytest.fixture()
def client(session: Session) -> Generator[TestClient, None, None]:
    application = create_app()

    def override_get_db_session() -> Generator[Session, None, None]:
        try:
            yield session
        finally:
            session.rollback()

    application.dependency_overrides[get_db_session] = override_get_db_session

    with TestClient(application) as test_client:
        yield test_client

    application.dependency_overrides.clear()
