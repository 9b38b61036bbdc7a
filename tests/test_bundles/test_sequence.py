"""Tests for bundle counter and serial formatting."""

from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from bundletrack.bundles.schemas import BundleCreate
from bundletrack.bundles.sequence import SequenceCounter, SequenceCounterError, make_serial
from bundletrack.bundles.service import BundleService
from bundletrack.db.models import Base, Bundle, Variant


class TestMakeSerial:
    """Tests for serial formatting."""

    def test_january(self):
        """Test serial uses two digit year and month letter A for January."""
        assert make_serial(17, date(2025, 1, 3)) == "25A17"

    def test_december(self):
        """Test December maps to letter L."""
        assert make_serial(4, date(2024, 12, 31)) == "24L4"

    def test_year_is_zero_padded(self):
        """Test years below ten keep two digits."""
        assert make_serial(1, date(2007, 6, 1)) == "07F1"


class TestSequenceCounter:
    """Tests for the persisted counter."""

    def test_read_absent(self, db: Session):
        """Test reading a counter that was never written returns empty string."""
        assert SequenceCounter(db).read() == ""

    def test_ensure_initialized_only_once(self, db: Session):
        """Test seeding does not overwrite an existing value."""
        counter = SequenceCounter(db)

        assert counter.ensure_initialized("1") is True
        counter.write("40")
        assert counter.ensure_initialized("1") is False
        assert counter.read() == "40"

    def test_reserve_advances_on_commit(self, db: Session, counter: SequenceCounter):
        """Test reserving yields the current value and stores the next one."""
        with counter.reserve() as number:
            db.commit()

        assert number == 1
        assert counter.read() == "2"

    def test_reserve_rolls_back_on_error(self, db: Session, counter: SequenceCounter):
        """Test a failed unit of work hands the number out again."""
        with pytest.raises(RuntimeError):
            with counter.reserve():
                raise RuntimeError("boom")

        assert counter.read() == "1"
        with counter.reserve() as number:
            db.commit()
        assert number == 1

    def test_reserve_non_numeric(self, db: Session):
        """Test a corrupt counter value is refused."""
        counter = SequenceCounter(db)
        counter.write("abc")

        with pytest.raises(SequenceCounterError):
            with counter.reserve():
                pass

        assert counter.read() == "abc"

    @pytest.mark.parametrize("stored", ["-3", "+5", "1_000", "\u0663"])
    def test_reserve_refuses_non_digit_values(self, db: Session, stored: str):
        """Test values int() would accept but that are not plain digits are refused."""
        counter = SequenceCounter(db)
        counter.write(stored)

        with pytest.raises(SequenceCounterError):
            with counter.reserve():
                pass

        assert counter.read() == stored

    def test_reserve_missing(self, db: Session):
        """Test reserving from an absent counter is refused."""
        with pytest.raises(SequenceCounterError):
            with SequenceCounter(db).reserve():
                pass


class TestConcurrentAllocation:
    """Tests for serial allocation under concurrent bundle creation."""

    WORKERS = 20

    @pytest.fixture
    def file_session_factory(self, tmp_path):
        """Session factory on a file database, so every thread gets its own connection."""
        engine = create_engine(
            f"sqlite:///{tmp_path / 'bundles.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=engine)
        factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        with factory() as session:
            session.add(
                Variant(s_no="AL-1020", name="Angle 40x40", series="ANGLE", print_series="ANG-40")
            )
            session.commit()
            SequenceCounter(session).ensure_initialized("1")

        yield factory
        engine.dispose()

    def test_parallel_creates_get_unique_serials(self, file_session_factory: sessionmaker):
        """Test every concurrent create gets its own serial and the counter ends at N+1."""
        data = BundleCreate(
            cutlength=12, quantity=10, weight=50, vs_no="AL-1020", po_no="PO-1", location=1
        )

        def create(_) -> str:
            with file_session_factory() as session:
                service = BundleService(session, clock=lambda: date(2025, 3, 9))
                return service.create_bundle(data).sr_no

        with ThreadPoolExecutor(max_workers=self.WORKERS) as pool:
            serials = list(pool.map(create, range(self.WORKERS)))

        assert len(set(serials)) == self.WORKERS
        assert sorted(serials) == sorted(f"25C{n}" for n in range(1, self.WORKERS + 1))

        with file_session_factory() as session:
            assert session.query(Bundle).count() == self.WORKERS
            assert SequenceCounter(session).read() == str(self.WORKERS + 1)
