"""Template rendering for slipprint."""

from slipprint.templates.engine import BaseTemplateEngine, TemplateError
from slipprint.templates.rasterizer import PillowRasterizer, TextRasterizer
from slipprint.templates.slip_engine import SlipTemplateEngine

__all__ = [
    "BaseTemplateEngine",
    "PillowRasterizer",
    "SlipTemplateEngine",
    "TemplateError",
    "TextRasterizer",
]
