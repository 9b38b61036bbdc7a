"""SQLAlchemy database models."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.mysql import CHAR
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

DEFAULT_RANGE = '{"start":0,"end":0}'


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys.

    Returns:
        str: UUID as 36-character string.
    """
    return str(uuid4())


class BundleStatus(str, enum.Enum):
    """Bundle lifecycle status enumeration."""

    ACTIVE = "ACTIVE"  # In stock
    SOLD = "SOLD"  # Archived into sold_bundles
    RETURNED = "RETURNED"  # Quarantined, awaiting permanent deletion


class PrintJobStatus(str, enum.Enum):
    """Print job delivery status enumeration."""

    PENDING = "pending"  # Waiting to be sent to the bridge
    COMPLETED = "completed"  # Bridge accepted the job
    FAILED = "failed"  # All delivery attempts failed


class Variant(Base):
    """Product variant (section) a bundle is cut from.

    Attributes:
        s_no: Section number, primary key.
        name: Item name printed on labels.
        series: Series name.
        print_series: Series text used on printed labels.
        breadth: Optional breadth dimension.
        length: Optional length dimension.
        thickness: Optional thickness dimension.
        leg: Optional leg dimension.
        range: JSON-encoded weight range ``{"start": n, "end": n}``.
    """

    __tablename__ = "variants"

    s_no: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    series: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    print_series: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    breadth: Mapped[float | None] = mapped_column(Float, nullable=True)
    length: Mapped[float | None] = mapped_column(Float, nullable=True)
    thickness: Mapped[float | None] = mapped_column(Float, nullable=True)
    leg: Mapped[float | None] = mapped_column(Float, nullable=True)
    range: Mapped[str | None] = mapped_column(Text, nullable=True, default=DEFAULT_RANGE)

    bundles: Mapped[list["Bundle"]] = relationship("Bundle", back_populates="variant")


class Bundle(Base):
    """A physical bundle resident in the active store.

    Attributes:
        uid: Primary key UUID, also encoded in the label QR code.
        sr_no: Human-readable serial (e.g. "25A17"), unique.
        status: ACTIVE or RETURNED while resident here.
        length: Cut length in feet.
        quantity: Number of pieces.
        weight: Total weight in kg.
        vs_no: FK to the variant.
        cast_id: Casting identifier.
        po_no: Purchase order, stored uppercase.
        location: Location code.
        created_at: Creation timestamp.
        modified_at: Last modification timestamp.
    """

    __tablename__ = "bundles"
    __table_args__ = (
        Index("ix_bundles_status", "status"),
        Index("ix_bundles_created_at", "created_at"),
    )

    uid: Mapped[str] = mapped_column(CHAR(36), primary_key=True, default=generate_uuid)
    sr_no: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    status: Mapped[BundleStatus] = mapped_column(
        Enum(BundleStatus, values_callable=lambda x: [e.value for e in x]),
        default=BundleStatus.ACTIVE,
        nullable=False,
    )
    length: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    vs_no: Mapped[str] = mapped_column(
        String(100), ForeignKey("variants.s_no", ondelete="RESTRICT"), nullable=False
    )
    cast_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    po_no: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    location: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    modified_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    variant: Mapped["Variant"] = relationship("Variant", back_populates="bundles")


class SoldBundle(Base):
    """Archived copy of a bundle that has been moved out as sold.

    Carries the same uid and serial as the bundle it was created from.

    Attributes:
        reference: Sale/move reference supplied with the move.
    """

    __tablename__ = "sold_bundles"

    uid: Mapped[str] = mapped_column(CHAR(36), primary_key=True)
    sr_no: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    status: Mapped[BundleStatus] = mapped_column(
        Enum(BundleStatus, values_callable=lambda x: [e.value for e in x]),
        default=BundleStatus.SOLD,
        nullable=False,
    )
    length: Mapped[float] = mapped_column(Float, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    vs_no: Mapped[str] = mapped_column(String(100), nullable=False)
    cast_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    po_no: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    location: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    modified_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    sold_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class SequenceCounterState(Base):
    """Named counter holding the next number to allocate.

    The value is kept as text so an operator override is stored verbatim
    and validated when it is next consumed.
    """

    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[str] = mapped_column(String(50), nullable=False, default="")


class PrintJob(Base):
    """Outbound print request to the printer bridge.

    Attributes:
        id: Primary key UUID.
        bundle_uid: Bundle the label belongs to.
        layout: Label layout (0 compact image, 1 field payload).
        payload: JSON body sent to the bridge.
        status: Delivery status.
        attempts: Number of delivery attempts made.
        error_message: Last delivery error, if any.
        created_at: Creation timestamp.
        completed_at: When delivery finished (successfully or not).
    """

    __tablename__ = "print_jobs"
    __table_args__ = (
        Index("ix_print_jobs_status", "status"),
        Index("ix_print_jobs_bundle_uid", "bundle_uid"),
    )

    id: Mapped[str] = mapped_column(CHAR(36), primary_key=True, default=generate_uuid)
    bundle_uid: Mapped[str] = mapped_column(CHAR(36), nullable=False)
    layout: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    status: Mapped[PrintJobStatus] = mapped_column(
        Enum(PrintJobStatus, values_callable=lambda x: [e.value for e in x]),
        default=PrintJobStatus.PENDING,
    )
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
