"""Layout planning: line boxes, surface size and per-segment positions."""

import logging
import math
from collections.abc import Mapping, Sequence

from slipprint.models.slip import DrawInstruction, LayoutPlan, StyledLine
from slipprint.models.template import (
    RENDER_FONT_SIZE_RANGE,
    Alignment,
    LineStyle,
    TemplateSettings,
    line_key,
)
from slipprint.templates.rasterizer import TextMeasurer

logger = logging.getLogger(__name__)


def clamp_font_size(size: float, where: str = "") -> float:
    """Clamp a font size to the renderable range, logging when it changes."""
    low, high = RENDER_FONT_SIZE_RANGE
    clamped = min(max(size, low), high)
    if clamped != size:
        logger.warning(f"Font size {size:g}{f' ({where})' if where else ''} out of range, clamped to {clamped:g}")
    return clamped


def plan(
    styled_lines: Sequence[StyledLine],
    settings: TemplateSettings,
    line_styles: Mapping[str, LineStyle],
    measurer: TextMeasurer,
    line_spacing: float = 0.0,
    bold: bool = False,
) -> LayoutPlan:
    """Plan the raster surface and where each text run is drawn.

    Line heights come from each line's effective font size times the line
    height multiplier. Segment size overrides change measurement and
    drawing, not the line box. ``line_spacing`` is added once between
    adjacent lines.

    Args:
        styled_lines: Output of the substitution step.
        settings: Global template settings.
        line_styles: Per-line overrides keyed ``line1``, ``line2``, ...
        measurer: Provides ``measure()`` for text widths.
        line_spacing: Extra pixels between adjacent lines.
        bold: Default weight for lines without an override.

    Returns:
        LayoutPlan with surface size and ordered draw instructions.
    """
    width = settings.width
    padding = settings.padding
    base_size = clamp_font_size(settings.font_size, "default")

    instructions: list[DrawInstruction] = []
    line_tops: list[float] = []
    line_heights: list[float] = []

    # Padding first, then each line box and gap in order; the float sum is
    # ceil'd so the accumulation order fixes the final height
    total_height = float(padding * 2)
    current_y = float(padding)
    for position, line in enumerate(styled_lines):
        if position > 0:
            current_y += line_spacing
            total_height += line_spacing

        key = line_key(line.index)
        style = line_styles.get(key)
        line_size = base_size
        line_bold = bold
        line_italic = False
        if style is not None:
            if style.font_size is not None:
                line_size = clamp_font_size(style.font_size, key)
            if style.bold is not None:
                line_bold = style.bold
            if style.italic is not None:
                line_italic = style.italic

        # Each segment is measured at its own size
        sizes: list[float] = []
        widths: list[float] = []
        for segment in line.segments:
            size = line_size if segment.font_size is None else clamp_font_size(segment.font_size, key)
            sizes.append(size)
            widths.append(
                measurer.measure(segment.text, settings.font_family, size, line_bold, line_italic)
                if segment.text
                else 0.0
            )
        total_width = sum(widths)

        if settings.align == Alignment.RIGHT:
            start_x = width - padding - total_width
        elif settings.align == Alignment.CENTER:
            start_x = (width - total_width) / 2
        else:
            start_x = float(padding)

        current_x = start_x
        for segment, size, seg_width in zip(line.segments, sizes, widths, strict=True):
            if segment.text:
                instructions.append(
                    DrawInstruction(
                        text=segment.text,
                        x=current_x,
                        y=current_y,
                        font_family=settings.font_family,
                        font_size=size,
                        bold=line_bold,
                        italic=line_italic,
                    )
                )
            current_x += seg_width

        line_height = line_size * settings.line_height
        line_tops.append(current_y)
        line_heights.append(line_height)
        current_y += line_height
        total_height += line_height

    height = math.ceil(total_height)
    logger.debug(f"Planned {len(styled_lines)} lines on a {width}x{height} surface")

    return LayoutPlan(
        width=width,
        height=height,
        instructions=tuple(instructions),
        line_tops=tuple(line_tops),
        line_heights=tuple(line_heights),
    )
