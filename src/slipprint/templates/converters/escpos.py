"""Wrap packed bitmaps in ESC/POS raster commands."""

from slipprint.models.slip import PackedBitmap

# GS v 0: print raster bit image
GS_V0 = b"\x1d\x76\x30"
# m: normal density, no scaling
MODE_NORMAL = 0x00
# ESC d n: print and feed n lines
ESC_FEED = b"\x1b\x64"
# GS V 66: feed and full cut
GS_CUT_FEED = b"\x1d\x56\x42"

DEFAULT_FEED_LINES = 3


def raster_header(bytes_per_row: int, height: int) -> bytes:
    """Build the ``GS v 0 m xL xH yL yH`` header (16-bit little-endian sizes)."""
    return GS_V0 + bytes(
        [
            MODE_NORMAL,
            bytes_per_row & 0xFF,
            (bytes_per_row >> 8) & 0xFF,
            height & 0xFF,
            (height >> 8) & 0xFF,
        ]
    )


def encode(bitmap: PackedBitmap, feed_lines: int = DEFAULT_FEED_LINES, cut: bool = False) -> bytes:
    """Encode a packed bitmap as an ESC/POS raster image job.

    The bitmap is framed as given: no size checks are made, so a bitmap
    whose data does not match its header prints garbled rather than
    failing here.

    Args:
        bitmap: Packed 1-bit image.
        feed_lines: Lines to feed after the image.
        cut: Append a feed-and-full-cut command (plain text jobs).

    Returns:
        Command bytes ready for the printer transport.
    """
    trailer = ESC_FEED + bytes([feed_lines & 0xFF])
    if cut:
        trailer += GS_CUT_FEED
    return raster_header(bitmap.bytes_per_row, bitmap.height) + bitmap.data + trailer
