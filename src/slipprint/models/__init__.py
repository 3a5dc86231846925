"""Pydantic models for slipprint."""

from slipprint.models.printer import PrinterConfig, PrinterType
from slipprint.models.slip import DrawInstruction, LayoutPlan, PackedBitmap, Segment, StyledLine
from slipprint.models.template import (
    Alignment,
    LineStyle,
    PrintTemplate,
    TemplateSettings,
    TemplateValidationError,
)

__all__ = [
    "Alignment",
    "DrawInstruction",
    "LayoutPlan",
    "LineStyle",
    "PackedBitmap",
    "PrinterConfig",
    "PrinterType",
    "PrintTemplate",
    "Segment",
    "StyledLine",
    "TemplateSettings",
    "TemplateValidationError",
]
