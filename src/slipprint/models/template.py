"""Print template configuration models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Supported raster widths in dots, keyed to the thermal paper they fit
PAPER_WIDTHS: dict[int, str] = {
    384: "48mm",
    480: "60mm",
    576: "72mm",
    640: "80mm",
}

# Save-time bounds for the template's global settings
FONT_SIZE_RANGE = (20.0, 40.0)
LINE_HEIGHT_RANGE = (1.0, 2.0)

# Render-time bounds; any font size outside these is clamped, never rejected
RENDER_FONT_SIZE_RANGE = (6.0, 72.0)


class Alignment(StrEnum):
    """Horizontal text alignment."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class Orientation(StrEnum):
    """Paper orientation."""

    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class _CamelModel(BaseModel):
    """Base model accepting both the editor's camelCase keys and snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TemplateSettings(_CamelModel):
    """Global layout settings for a template."""

    width: int = 480
    font_size: float = 22
    line_height: float = 1.15
    padding: int = 2
    align: Alignment = Alignment.CENTER
    font_family: str = "Tahoma, Arial, sans-serif"
    orientation: Orientation = Orientation.PORTRAIT


class LineStyle(_CamelModel):
    """Per-line style override. Unset fields fall back to the template settings."""

    font_size: float | None = None
    bold: bool | None = None
    italic: bool | None = None


class PrintTemplate(_CamelModel):
    """A user-authored slip template."""

    name: str
    content: str
    settings: TemplateSettings = Field(default_factory=TemplateSettings)
    line_styles: dict[str, LineStyle] = Field(default_factory=dict)
    placeholder_sizes: dict[str, float] = Field(default_factory=dict)

    def get_line_style(self, index: int) -> LineStyle | None:
        """Get the style override for a 0-based line index."""
        return self.line_styles.get(line_key(index))

    def to_storage(self) -> dict:
        """Dump in the camelCase shape used by the editor's store."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def line_key(index: int) -> str:
    """Style key for a 0-based line index (``line1`` is the first line)."""
    return f"line{index + 1}"


def validate_template(template: PrintTemplate) -> list[str]:
    """Check a template against the save-time rules.

    Returns:
        List of user-facing error messages, empty if the template is valid.
    """
    errors: list[str] = []
    settings = template.settings

    if not template.name or not template.name.strip():
        errors.append("Template name must not be empty")

    if not template.content or not template.content.strip():
        errors.append("Template content must not be empty")

    if settings.width not in PAPER_WIDTHS:
        presets = ", ".join(f"{w} ({mm})" for w, mm in PAPER_WIDTHS.items())
        errors.append(f"Width must be one of the paper presets: {presets}")

    low, high = FONT_SIZE_RANGE
    if not low <= settings.font_size <= high:
        errors.append(f"Font size must be between {low:g}pt and {high:g}pt")

    low, high = LINE_HEIGHT_RANGE
    if not low <= settings.line_height <= high:
        errors.append(f"Line height must be between {low:g} and {high:g}")

    if settings.padding < 0:
        errors.append("Padding must not be negative")

    return errors


class TemplateValidationError(ValueError):
    """Raised when a template fails save-time validation."""

    def __init__(self, name: str, errors: list[str]) -> None:
        self.name = name
        self.errors = errors
        super().__init__(f"Invalid template '{name}': {'; '.join(errors)}")


def ensure_valid(template: PrintTemplate) -> PrintTemplate:
    """Return the template unchanged, or raise TemplateValidationError."""
    errors = validate_template(template)
    if errors:
        raise TemplateValidationError(template.name, errors)
    return template


DEFAULT_TEMPLATE = PrintTemplate(
    name="Mặc định XP-K200L",
    content=(
        "#{{sessionIndex}} - {{phone}}\n"
        "{{customerName}}\n"
        "{{productCode}} - {{productName}}\n"
        "{{comment}}\n"
        "{{time}}"
    ),
    settings=TemplateSettings(
        width=480,
        font_size=22,
        line_height=1.15,
        padding=2,
        align=Alignment.CENTER,
        font_family="Tahoma, Arial, sans-serif",
        orientation=Orientation.PORTRAIT,
    ),
    line_styles={
        "line1": LineStyle(font_size=22, bold=True),
        "line2": LineStyle(font_size=22, bold=True),
        "line3": LineStyle(font_size=14, bold=True),
        "line4": LineStyle(font_size=22, bold=True, italic=True),
        "line5": LineStyle(font_size=9, bold=True),
    },
    placeholder_sizes={
        "sessionIndex": 22,
        "phone": 18,
        "customerName": 22,
        "productCode": 14,
        "productName": 14,
        "comment": 22,
        "time": 9,
    },
)


def sample_data() -> dict[str, str]:
    """Sample record for previewing the default placeholders."""
    return {
        "sessionIndex": "123",
        "phone": "0123456789",
        "customerName": "Nguyễn Văn A",
        "productCode": "SP001",
        "productName": "Áo thun nam cotton cao cấp",
        "comment": "Giao hàng nhanh nhé shop!",
        "time": datetime.now().strftime("%H:%M:%S %d/%m/%Y"),
    }


class LineConfig(_CamelModel):
    """One line of a plain-text job with its own size and weight."""

    text: str
    font_size: float
    bold: bool | None = None


class TextOptions(_CamelModel):
    """Layout options for printing free text without a template."""

    width: int = 384
    font_size: float = 24
    font_family: str = "Arial, sans-serif"
    line_height: float = 1.2
    align: Alignment = Alignment.CENTER
    padding: int = 10
    bold: bool = False
    lines: list[LineConfig] | None = None  # Overrides text and font_size when set
    line_spacing: float = 0  # Extra pixels between adjacent lines

    def to_settings(self) -> TemplateSettings:
        """Equivalent template settings for the layout planner."""
        return TemplateSettings(
            width=self.width,
            font_size=self.font_size,
            line_height=self.line_height,
            padding=self.padding,
            align=self.align,
            font_family=self.font_family,
        )
