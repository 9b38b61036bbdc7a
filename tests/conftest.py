"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from uuid import uuid4

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DEBUG"] = "false"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bundletrack.bundles.sequence import SequenceCounter
from bundletrack.config import Settings
from bundletrack.db.models import Base, Bundle, BundleStatus, Variant
from bundletrack.labels.dispatcher import PrintDispatcher

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings with the label cache in a temporary directory and no retry delay."""
    return Settings(
        database_url=SQLALCHEMY_TEST_DATABASE_URL,
        label_cache_dir=str(tmp_path / "cache"),
        label_logo_path=str(tmp_path / "missing-logo.png"),
        printer_host="printer.test",
        print_max_attempts=3,
        print_retry_backoff=0,
    )


@pytest.fixture
def bridge_requests() -> list[httpx.Request]:
    """Requests received by the fake printer bridge."""
    return []


@pytest.fixture
def bridge_transport(bridge_requests: list[httpx.Request]) -> httpx.MockTransport:
    """Printer bridge that accepts every request."""

    def handler(request: httpx.Request) -> httpx.Response:
        bridge_requests.append(request)
        return httpx.Response(200, json={"ok": True})

    return httpx.MockTransport(handler)


@pytest.fixture
def session_factory() -> sessionmaker:
    """Session factory bound to the test database."""
    return TestingSessionLocal


@pytest.fixture
def dispatcher(
    session_factory: sessionmaker,
    test_settings: Settings,
    bridge_transport: httpx.MockTransport,
) -> PrintDispatcher:
    """Print dispatcher bound to the test database and the fake bridge."""
    return PrintDispatcher(
        session_factory=session_factory,
        settings=test_settings,
        transport=bridge_transport,
        sleep=lambda _: None,
    )


@pytest.fixture(scope="function")
def client(
    db: Session,
    test_settings: Settings,
    dispatcher: PrintDispatcher,
) -> Generator[TestClient, None, None]:
    """Create a test client with database, settings and printer overrides."""
    # Import here to ensure env vars are set
    from bundletrack.config import get_settings
    from bundletrack.dependencies import get_db
    from bundletrack.labels.dispatcher import get_dispatcher
    from bundletrack.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def counter(db: Session) -> SequenceCounter:
    """Bundle counter seeded with 1."""
    sequence = SequenceCounter(db)
    sequence.ensure_initialized("1")
    return sequence


@pytest.fixture
def test_variant(db: Session) -> Variant:
    """Create a test variant."""
    variant = Variant(
        s_no="AL-1020",
        name="Angle 40x40",
        series="ANGLE",
        print_series="ANG-40",
        breadth=40.0,
        length=40.0,
        thickness=3.0,
        range='{"start":10,"end":12}',
    )
    db.add(variant)
    db.commit()
    db.refresh(variant)
    return variant


@pytest.fixture
def make_bundle(db: Session, test_variant: Variant) -> Callable[..., Bundle]:
    """Factory for bundles resident in the active store."""

    def _make(sr_no: str, **overrides) -> Bundle:
        values = {
            "uid": str(uuid4()),
            "sr_no": sr_no,
            "status": BundleStatus.ACTIVE,
            "length": 12.0,
            "quantity": 10,
            "weight": 50.0,
            "vs_no": test_variant.s_no,
            "cast_id": "C-7",
            "po_no": "PO-1",
            "location": 1,
        }
        values.update(overrides)
        bundle = Bundle(**values)
        db.add(bundle)
        db.commit()
        db.refresh(bundle)
        return bundle

    return _make


@pytest.fixture
def test_bundle(make_bundle: Callable[..., Bundle]) -> Bundle:
    """Create a test bundle."""
    return make_bundle("25A1")
