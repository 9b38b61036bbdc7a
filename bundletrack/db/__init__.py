"""Database module."""

from bundletrack.db.database import SessionLocal, engine, init_db
from bundletrack.db.models import (
    Base,
    Bundle,
    BundleStatus,
    PrintJob,
    PrintJobStatus,
    SequenceCounterState,
    SoldBundle,
    Variant,
)

__all__ = [
    "SessionLocal",
    "engine",
    "init_db",
    "Base",
    "Bundle",
    "BundleStatus",
    "PrintJob",
    "PrintJobStatus",
    "SequenceCounterState",
    "SoldBundle",
    "Variant",
]
