"""Text rasterization capability and its Pillow binding."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from PIL import Image, ImageDraw

from slipprint.models.slip import DrawInstruction
from slipprint.templates.fonts import FontManager, get_font_manager

logger = logging.getLogger(__name__)


class TextMeasurer(Protocol):
    """Anything that can report the advance width of a text run."""

    def measure(self, text: str, font_family: str, font_size: float, bold: bool, italic: bool) -> float: ...


class TextRasterizer(ABC):
    """Draws text runs onto a white surface in black, top-baseline.

    Layout only ever asks for widths; drawing happens once the full plan
    is known. Surfaces are opaque to the pipeline apart from ``pixels()``.
    """

    @abstractmethod
    def measure(self, text: str, font_family: str, font_size: float, bold: bool, italic: bool) -> float:
        """Return the advance width of ``text`` in pixels."""
        pass

    @abstractmethod
    def new_surface(self, width: int, height: int) -> Any:
        """Create a white drawing surface."""
        pass

    @abstractmethod
    def draw(self, surface: Any, instruction: DrawInstruction) -> None:
        """Draw one text run with its top edge at ``instruction.y``."""
        pass

    @abstractmethod
    def pixels(self, surface: Any) -> bytes:
        """Return the surface as row-major RGBA bytes."""
        pass

    def to_image(self, surface: Any) -> Image.Image:
        """Return the surface as a PIL image (for previews)."""
        width, height = self.surface_size(surface)
        return Image.frombytes("RGBA", (width, height), self.pixels(surface))

    @abstractmethod
    def surface_size(self, surface: Any) -> tuple[int, int]:
        """Return ``(width, height)`` of a surface."""
        pass


class PillowRasterizer(TextRasterizer):
    """Rasterizer backed by Pillow and FreeType.

    Missing bold faces are synthesized with a one pixel stroke and missing
    italic faces with a horizontal shear, so every style request renders
    distinctly even on hosts with a single font file.
    """

    ITALIC_SHEAR = 0.2

    def __init__(self, font_manager: FontManager | None = None, font_paths: Sequence[str | Path] | None = None) -> None:
        """Initialize the rasterizer.

        Args:
            font_manager: FontManager to resolve fonts with.
            font_paths: Extra font search paths, used when no manager is given.
        """
        self.font_manager = font_manager or get_font_manager(font_paths)

    def _font(self, font_family: str, font_size: float, bold: bool, italic: bool):
        face = self.font_manager.resolve(font_family, bold, italic)
        font = self.font_manager.get_font(face, font_size)
        stroke = 1 if bold and not face.bold else 0
        shear = italic and not face.italic
        return font, stroke, shear

    def measure(self, text: str, font_family: str, font_size: float, bold: bool, italic: bool) -> float:
        """Advance width of the text, including synthetic bold strokes."""
        if not text:
            return 0.0
        font, stroke, _ = self._font(font_family, font_size, bold, italic)
        return float(font.getlength(text)) + 2 * stroke

    def new_surface(self, width: int, height: int) -> Image.Image:
        return Image.new("RGB", (width, height), color="white")

    def surface_size(self, surface: Image.Image) -> tuple[int, int]:
        return surface.size

    def draw(self, surface: Image.Image, instruction: DrawInstruction) -> None:
        """Draw a text run at its planned position."""
        font, stroke, shear = self._font(
            instruction.font_family,
            instruction.font_size,
            instruction.bold,
            instruction.italic,
        )

        if not shear:
            draw = ImageDraw.Draw(surface)
            draw.text(
                (instruction.x, instruction.y),
                instruction.text,
                font=font,
                fill="black",
                anchor="la",
                stroke_width=stroke,
                stroke_fill="black",
            )
            return

        # Render onto a mask, shear it, then stamp it onto the surface
        left, top, right, bottom = font.getbbox(instruction.text, anchor="la", stroke_width=stroke)
        box_w = int(right + abs(self.ITALIC_SHEAR) * bottom) + 2
        box_h = int(bottom) + 2
        if box_w <= 0 or box_h <= 0:
            return
        mask = Image.new("L", (box_w, box_h), 0)
        ImageDraw.Draw(mask).text((0, 0), instruction.text, font=font, fill=255, anchor="la", stroke_width=stroke)
        # Affine maps output -> input; shift the top right so the baseline area stays put
        mask = mask.transform(
            mask.size,
            Image.Transform.AFFINE,
            (1, self.ITALIC_SHEAR, -self.ITALIC_SHEAR * box_h, 0, 1, 0),
            resample=Image.Resampling.BILINEAR,
        )
        surface.paste("black", (int(round(instruction.x)), int(round(instruction.y))), mask)

    def pixels(self, surface: Image.Image) -> bytes:
        return surface.convert("RGBA").tobytes()

    def to_image(self, surface: Image.Image) -> Image.Image:
        return surface.copy()
