"""Slip rendering pipeline: template -> raster -> packed bitmap -> ESC/POS."""

import io
import logging
from collections.abc import Mapping
from typing import Any

from slipprint.models.slip import LayoutPlan, PackedBitmap, Segment, StyledLine
from slipprint.models.template import (
    LineStyle,
    PrintTemplate,
    TemplateValidationError,
    TextOptions,
    ensure_valid,
    line_key,
)
from slipprint.templates.converters import encode, pack
from slipprint.templates.converters.escpos import DEFAULT_FEED_LINES
from slipprint.templates.engine import BaseTemplateEngine, TemplateError
from slipprint.templates.layout import plan
from slipprint.templates.rasterizer import PillowRasterizer, TextRasterizer
from slipprint.templates.substitution import substitute

logger = logging.getLogger(__name__)


class SlipTemplateEngine(BaseTemplateEngine):
    """Renders print templates and free text to ESC/POS raster jobs.

    Every call runs the whole pipeline from scratch. The only state kept
    between calls is the rasterizer's font cache, which does not affect
    output, so identical inputs give byte-identical jobs.

    Template jobs end with a paper feed; plain-text jobs additionally cut.
    """

    def __init__(
        self,
        rasterizer: TextRasterizer | None = None,
        feed_lines: int = DEFAULT_FEED_LINES,
    ) -> None:
        """Initialize the engine.

        Args:
            rasterizer: Text rasterizer; defaults to the Pillow binding.
            feed_lines: Lines fed after each job.
        """
        self.rasterizer = rasterizer or PillowRasterizer()
        self.feed_lines = feed_lines

    def render(self, template: PrintTemplate, context: Mapping[str, Any]) -> bytes:
        """Render a template to an ESC/POS job (feed, no cut).

        Raises:
            TemplateError: If the template is invalid or rasterizing fails.
        """
        bitmap = self.render_bitmap(template, context)
        job = encode(bitmap, feed_lines=self.feed_lines, cut=False)
        logger.debug(f"ESC/POS encoded: {len(job)} bytes")
        return job

    def render_text(self, text: str, options: TextOptions | None = None) -> bytes:
        """Render free text to an ESC/POS job (feed and cut).

        Raises:
            TemplateError: If rasterizing fails.
        """
        bitmap = self.render_text_bitmap(text, options)
        job = encode(bitmap, feed_lines=self.feed_lines, cut=True)
        logger.debug(f"ESC/POS encoded: {len(job)} bytes")
        return job

    def render_bitmap(self, template: PrintTemplate, context: Mapping[str, Any]) -> PackedBitmap:
        """Render a template to a packed 1-bit bitmap."""
        layout = self.layout_template(template, context)
        return self._pack(layout, self._draw(layout))

    def render_text_bitmap(self, text: str, options: TextOptions | None = None) -> PackedBitmap:
        """Render free text to a packed 1-bit bitmap."""
        layout = self.layout_text(text, options)
        return self._pack(layout, self._draw(layout))

    def render_preview(
        self,
        template: PrintTemplate,
        context: Mapping[str, Any],
        format: str = "PNG",
    ) -> bytes:
        """Render a template to preview image bytes (PNG by default).

        Raises:
            TemplateError: If the template is invalid or rasterizing fails.
        """
        return self.preview_layout(self.layout_template(template, context), format=format)

    def preview_layout(self, layout: LayoutPlan, format: str = "PNG") -> bytes:
        """Rasterize a finished layout to preview image bytes."""
        image = self.rasterizer.to_image(self._draw(layout))
        buffer = io.BytesIO()
        image.save(buffer, format=format)
        return buffer.getvalue()

    def layout_template(self, template: PrintTemplate, context: Mapping[str, Any]) -> LayoutPlan:
        """Validate, substitute and lay out a template.

        Raises:
            TemplateError: If the template is invalid or measuring fails.
        """
        try:
            ensure_valid(template)
        except TemplateValidationError as e:
            raise TemplateError(str(e)) from e

        lines = substitute(template, context)
        try:
            return plan(lines, template.settings, template.line_styles, self.rasterizer)
        except Exception as e:
            raise TemplateError(f"Failed to lay out template '{template.name}': {e}") from e

    def layout_text(self, text: str, options: TextOptions | None = None) -> LayoutPlan:
        """Lay out free text.

        Raises:
            TemplateError: If measuring fails.
        """
        options = options or TextOptions()
        lines, line_styles = text_lines(text, options)
        try:
            return plan(
                lines,
                options.to_settings(),
                line_styles,
                self.rasterizer,
                line_spacing=options.line_spacing,
                bold=options.bold,
            )
        except Exception as e:
            raise TemplateError(f"Failed to lay out text: {e}") from e

    def _draw(self, layout: LayoutPlan) -> Any:
        try:
            surface = self.rasterizer.new_surface(layout.width, layout.height)
            for instruction in layout.instructions:
                self.rasterizer.draw(surface, instruction)
        except Exception as e:
            raise TemplateError(f"Failed to rasterize slip: {e}") from e

        logger.debug(f"Bitmap created: {layout.width}x{layout.height} pixels")
        return surface

    def _pack(self, layout: LayoutPlan, surface: Any) -> PackedBitmap:
        try:
            pixels = self.rasterizer.pixels(surface)
        except Exception as e:
            raise TemplateError(f"Failed to read rasterized slip: {e}") from e
        return pack(pixels, layout.width, layout.height)


def text_lines(text: str, options: TextOptions) -> tuple[list[StyledLine], dict[str, LineStyle]]:
    """Build styled lines and per-line styles for a plain-text job.

    When ``options.lines`` is set it replaces ``text``; each entry carries
    its own size, and its own weight or the job's default.
    """
    if options.lines:
        lines = []
        styles = {}
        for index, config in enumerate(options.lines):
            lines.append(StyledLine(index=index, segments=(Segment(text=config.text),)))
            styles[line_key(index)] = LineStyle(
                font_size=config.font_size,
                bold=options.bold if config.bold is None else config.bold,
            )
        return lines, styles

    lines = [
        StyledLine(index=index, segments=(Segment(text=line),))
        for index, line in enumerate(text.split("\n"))
    ]
    return lines, {}
