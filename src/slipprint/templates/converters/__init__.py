"""Pixel buffer to printer command converters."""

from slipprint.templates.converters.escpos import encode, raster_header
from slipprint.templates.converters.mono import pack, pack_image

__all__ = [
    "encode",
    "pack",
    "pack_image",
    "raster_header",
]
