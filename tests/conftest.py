"""Pytest configuration and fixtures."""

import pytest

from slipprint.models.slip import DrawInstruction
from slipprint.models.template import PrintTemplate, TemplateSettings
from slipprint.templates.rasterizer import TextRasterizer


class FixedAdvanceRasterizer(TextRasterizer):
    """Deterministic rasterizer: every glyph is half the font size wide.

    Drawing fills the run's box (advance width by font size) in black, so
    pixel tests can predict exactly which bits are set.
    """

    def __init__(self) -> None:
        self.measure_calls: list[tuple[str, float, bool, bool]] = []

    def measure(self, text: str, font_family: str, font_size: float, bold: bool, italic: bool) -> float:
        self.measure_calls.append((text, font_size, bold, italic))
        return len(text) * font_size / 2

    def new_surface(self, width: int, height: int) -> dict:
        return {"width": width, "height": height, "data": bytearray(b"\xff" * (width * height * 4))}

    def surface_size(self, surface: dict) -> tuple[int, int]:
        return surface["width"], surface["height"]

    def draw(self, surface: dict, instruction: DrawInstruction) -> None:
        width, height = surface["width"], surface["height"]
        advance = self.measure(instruction.text, instruction.font_family, instruction.font_size, False, False)
        x0 = max(int(instruction.x), 0)
        x1 = min(int(instruction.x + advance), width)
        y0 = max(int(instruction.y), 0)
        y1 = min(int(instruction.y + instruction.font_size), height)
        data = surface["data"]
        for y in range(y0, y1):
            for x in range(x0, x1):
                i = (y * width + x) * 4
                data[i : i + 3] = b"\x00\x00\x00"

    def pixels(self, surface: dict) -> bytes:
        return bytes(surface["data"])


class FailingRasterizer(FixedAdvanceRasterizer):
    """Rasterizer whose drawing always fails."""

    def draw(self, surface: dict, instruction: DrawInstruction) -> None:
        raise RuntimeError("surface lost")


@pytest.fixture
def rasterizer() -> FixedAdvanceRasterizer:
    """Fixed-advance rasterizer for deterministic layout tests."""
    return FixedAdvanceRasterizer()


@pytest.fixture
def simple_template() -> PrintTemplate:
    """Two unstyled lines at size 20, line height 1.5, padding 2."""
    return PrintTemplate(
        name="two-lines",
        content="{{a}}\n{{b}}",
        settings=TemplateSettings(width=480, font_size=20, line_height=1.5, padding=2),
    )


@pytest.fixture
def failing_rasterizer() -> FailingRasterizer:
    """Rasterizer that raises on every draw."""
    return FailingRasterizer()
