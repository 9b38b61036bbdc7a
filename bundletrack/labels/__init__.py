"""Label rendering and printing."""

from bundletrack.labels.dispatcher import PrintDispatcher, build_print_fields
from bundletrack.labels.renderer import (
    DisabledLabelRenderer,
    LabelRenderer,
    LabelRenderingUnavailable,
    PillowLabelRenderer,
    get_label_renderer,
)
from bundletrack.labels.router import router
from bundletrack.labels.service import LabelService

__all__ = [
    "router",
    "DisabledLabelRenderer",
    "LabelRenderer",
    "LabelRenderingUnavailable",
    "LabelService",
    "PillowLabelRenderer",
    "PrintDispatcher",
    "build_print_fields",
    "get_label_renderer",
]
