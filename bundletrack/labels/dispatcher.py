"""Print job dispatch to the printer bridge.

A print request is first recorded as a pending PrintJob, then delivered to
the bridge after the HTTP response has been sent. Delivery retries a fixed
number of times and records the outcome on the job; it never raises.
"""

import logging
import time
from collections.abc import Callable
from datetime import datetime

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from bundletrack.config import Settings, get_settings
from bundletrack.db.database import SessionLocal
from bundletrack.db.models import Bundle, PrintJob, PrintJobStatus, Variant
from bundletrack.labels.formatting import format_fixed, format_significant

logger = logging.getLogger(__name__)


def build_print_fields(bundle: Bundle, variant: Variant) -> dict:
    """Build the field payload for a layout 1 print.

    Args:
        bundle: Bundle to print.
        variant: The bundle's variant.

    Returns:
        dict: Payload the printer bridge lays out itself.
    """
    weight_each = bundle.weight / bundle.quantity
    return {
        "uid": bundle.uid,
        "layout": 1,
        "weight": format_fixed(bundle.weight),
        "weight_each": format_significant(weight_each),
        "weight12ft": format_significant(weight_each / bundle.length * 12),
        "sr_no": bundle.sr_no,
        "quantity": bundle.quantity,
        "length": format_fixed(bundle.length),
        "series": variant.print_series,
        "po": bundle.po_no or "",
    }


def build_image_payload(uid: str) -> dict:
    """Build the payload for a layout 0 print of a cached label image."""
    return {"uid": f"{uid}.png", "layout": 0}


class PrintDispatcher:
    """Queues print jobs and delivers them to the printer bridge.

    Attributes:
        session_factory: Opens sessions for background delivery.
        settings: Application settings (bridge URL, timeout, retries).
        transport: Optional httpx transport, replaced in tests.
        sleep: Called between attempts with the backoff delay.
    """

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self.transport = transport
        self.sleep = sleep

    def enqueue(self, db: Session, bundle_uid: str, layout: int, payload: dict) -> PrintJob:
        """Record a pending print job.

        Args:
            db: Database session.
            bundle_uid: Bundle the label belongs to.
            layout: Label layout.
            payload: JSON body for the bridge.

        Returns:
            PrintJob: Created job.
        """
        job = PrintJob(
            bundle_uid=bundle_uid,
            layout=layout,
            payload=payload,
            status=PrintJobStatus.PENDING,
            attempts=0,
        )
        db.add(job)
        db.commit()
        db.refresh(job)
        logger.info(f"Queued print job {job.id} for bundle {bundle_uid} (layout {layout})")
        return job

    def get_job(self, db: Session, job_id: str) -> PrintJob | None:
        """Get a print job by ID."""
        return db.get(PrintJob, job_id, populate_existing=True)

    def _post(self, client: httpx.Client, payload: dict) -> None:
        response = client.post(self.settings.printer_url, json=payload)
        response.raise_for_status()

    def deliver(self, job_id: str) -> PrintJobStatus | None:
        """Send a queued job to the printer bridge.

        Runs in its own session. Failures are logged and stored on the job.

        Args:
            job_id: Print job ID.

        Returns:
            PrintJobStatus | None: Final status, None if the job does not exist.
        """
        db = self.session_factory()
        try:
            job = db.get(PrintJob, job_id)
            if not job:
                logger.warning(f"Print job {job_id} not found")
                return None

            max_attempts = max(1, self.settings.print_max_attempts)
            last_error: str | None = None
            timeout = self.settings.print_timeout
            with httpx.Client(timeout=timeout, transport=self.transport) as client:
                for attempt in range(1, max_attempts + 1):
                    job.attempts = attempt
                    try:
                        self._post(client, job.payload)
                        last_error = None
                        break
                    except httpx.HTTPStatusError as e:
                        last_error = f"Printer bridge returned HTTP {e.response.status_code}"
                    except httpx.HTTPError as e:
                        last_error = f"Printer bridge unreachable: {e}"
                    logger.warning(
                        f"Print job {job.id} attempt {attempt}/{max_attempts} failed: {last_error}"
                    )
                    if attempt < max_attempts:
                        self.sleep(self.settings.print_retry_backoff * attempt)

            job.status = PrintJobStatus.FAILED if last_error else PrintJobStatus.COMPLETED
            job.error_message = last_error
            job.completed_at = datetime.utcnow()
            db.commit()

            if last_error:
                logger.error(f"Print job {job.id} failed: {last_error}")
            else:
                logger.info(f"Print job {job.id} delivered")
            return job.status
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to record delivery of print job {job_id}: {e}")
            return None
        finally:
            db.close()


def get_dispatcher() -> PrintDispatcher:
    """Get the print dispatcher.

    Returns:
        PrintDispatcher: Dispatcher using the application session factory.
    """
    return PrintDispatcher()
