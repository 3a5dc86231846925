"""Derived artifacts produced while rendering a slip."""

from pydantic import BaseModel, ConfigDict, Field


class Segment(BaseModel):
    """A run of text within a line sharing one font size."""

    model_config = ConfigDict(frozen=True)

    text: str
    font_size: float | None = None  # None = use the line's effective size


class StyledLine(BaseModel):
    """One template line after substitution."""

    model_config = ConfigDict(frozen=True)

    index: int  # 0-based, style key is line{index + 1}
    segments: tuple[Segment, ...] = ()

    @property
    def text(self) -> str:
        """Plain text of the line, segment boundaries dropped."""
        return "".join(segment.text for segment in self.segments)


class DrawInstruction(BaseModel):
    """A single text run to draw at an absolute position."""

    model_config = ConfigDict(frozen=True)

    text: str
    x: float
    y: float
    font_family: str
    font_size: float
    bold: bool = False
    italic: bool = False


class LayoutPlan(BaseModel):
    """Surface dimensions plus ordered draw instructions."""

    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    instructions: tuple[DrawInstruction, ...] = ()
    line_tops: tuple[float, ...] = ()
    line_heights: tuple[float, ...] = ()


class PackedBitmap(BaseModel):
    """1-bit-per-pixel image, MSB-first, each row padded to a byte boundary.

    ``bytes_per_row`` is stored rather than derived so that the encoder
    frames exactly what it is given.
    """

    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    bytes_per_row: int
    data: bytes = Field(default=b"", repr=False)
