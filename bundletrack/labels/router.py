"""Label and print API routes."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from fastapi.responses import Response

from bundletrack.dependencies import AppSettings, DbSession
from bundletrack.labels.dispatcher import (
    PrintDispatcher,
    build_image_payload,
    build_print_fields,
    get_dispatcher,
)
from bundletrack.labels.renderer import (
    LAYOUTS,
    LabelRenderer,
    LabelRenderingUnavailable,
    get_label_renderer,
)
from bundletrack.labels.schemas import PrintJobResponse, PrintResponse
from bundletrack.labels.service import LabelService, get_label_service

router = APIRouter()


def get_renderer(settings: AppSettings) -> LabelRenderer:
    """Get label renderer dependency."""
    return get_label_renderer(settings)


def get_service(
    db: DbSession,
    renderer: Annotated[LabelRenderer, Depends(get_renderer)],
    settings: AppSettings,
) -> LabelService:
    """Get label service dependency."""
    return get_label_service(db, renderer, settings.label_cache_dir)


def _check_layout(layout: int) -> None:
    if layout not in LAYOUTS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid layout. Must be one of: {', '.join(str(x) for x in LAYOUTS)}",
        )


@router.get("/print/{layout}/{uid}", response_model=PrintResponse, response_model_exclude_none=True)
async def print_label(
    layout: int,
    uid: str,
    background_tasks: BackgroundTasks,
    db: DbSession,
    service: Annotated[LabelService, Depends(get_service)],
    dispatcher: Annotated[PrintDispatcher, Depends(get_dispatcher)],
):
    """Queue a label print for a bundle.

    Layout 0 renders the label image into the label cache and asks the
    bridge to print that file. Layout 1 sends the bundle fields and the
    bridge lays the label out itself. Delivery happens after the response.

    Args:
        layout: Label layout (0 or 1).
        uid: Bundle UUID.
        background_tasks: Scheduler for delivery.
        db: Database session.
        service: Label service.
        dispatcher: Print dispatcher.

    Returns:
        PrintResponse: ``print`` 1 with the job ID, or 0 if the bundle does not exist.

    Raises:
        HTTPException: If the layout is invalid or rendering is unavailable.
    """
    _check_layout(layout)

    if layout == 0:
        try:
            path = service.render_label(uid, 0)
        except LabelRenderingUnavailable as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=str(e),
            )
        if not path:
            return PrintResponse(print=0)
        payload = build_image_payload(uid)
    else:
        resolved = service.get_bundle_with_variant(uid)
        if not resolved:
            return PrintResponse(print=0)
        payload = build_print_fields(*resolved)

    job = dispatcher.enqueue(db, uid, layout, payload)
    background_tasks.add_task(dispatcher.deliver, job.id)
    return PrintResponse(print=1, job_id=job.id)


@router.get("/label/{layout}/{uid}")
async def get_label(
    layout: int,
    uid: str,
    service: Annotated[LabelService, Depends(get_service)],
):
    """Render a bundle label and return it as PNG.

    Args:
        layout: Label layout (0 or 1).
        uid: Bundle UUID.
        service: Label service.

    Returns:
        Response: PNG image.

    Raises:
        HTTPException: If the layout is invalid, the bundle is missing or
            rendering is unavailable.
    """
    _check_layout(layout)

    try:
        path = service.render_label(uid, layout)
    except LabelRenderingUnavailable as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    if not path:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bundle not found",
        )

    return Response(
        content=path.read_bytes(),
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename={path.name}"},
    )


@router.get("/print-jobs/{job_id}", response_model=PrintJobResponse)
async def get_print_job(
    job_id: str,
    db: DbSession,
    dispatcher: Annotated[PrintDispatcher, Depends(get_dispatcher)],
):
    """Get delivery status of a print job.

    Args:
        job_id: Print job ID.
        db: Database session.
        dispatcher: Print dispatcher.

    Returns:
        PrintJobResponse: Print job.

    Raises:
        HTTPException: If print job not found.
    """
    job = dispatcher.get_job(db, job_id)
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Print job not found",
        )
    return job
