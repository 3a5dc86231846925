"""Pack RGB(A) pixel buffers into 1-bit thermal printer bitmaps."""

from PIL import Image

from slipprint.models.slip import PackedBitmap

DEFAULT_THRESHOLD = 128


def pack(
    pixels: bytes | bytearray | memoryview,
    width: int,
    height: int,
    threshold: int = DEFAULT_THRESHOLD,
    channels: int = 4,
) -> PackedBitmap:
    """Threshold a pixel buffer to 1 bit per pixel.

    A pixel is ink (bit set) when the plain mean of its red, green and blue
    channels is below ``threshold``; alpha is ignored. Bits are packed
    MSB-first and every row starts on a fresh byte, so the unused low bits
    at the end of a row stay zero.

    Args:
        pixels: Row-major pixel data, ``channels`` bytes per pixel.
        width: Width in pixels.
        height: Height in pixels.
        threshold: Intensity below which a pixel prints.
        channels: Bytes per pixel (4 for RGBA, 3 for RGB).

    Returns:
        PackedBitmap of exactly ``ceil(width / 8) * height`` bytes.
    """
    bytes_per_row = (width + 7) // 8
    data = bytearray(bytes_per_row * height)
    # mean < threshold  <=>  r + g + b < 3 * threshold, kept in integers
    limit = 3 * threshold
    stride = width * channels

    for y in range(height):
        row = y * stride
        out = y * bytes_per_row
        for x in range(width):
            i = row + x * channels
            if pixels[i] + pixels[i + 1] + pixels[i + 2] < limit:
                data[out + (x >> 3)] |= 0x80 >> (x & 7)

    return PackedBitmap(width=width, height=height, bytes_per_row=bytes_per_row, data=bytes(data))


def pack_image(image: Image.Image, threshold: int = DEFAULT_THRESHOLD) -> PackedBitmap:
    """Pack a PIL image, converting it to RGBA first."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    width, height = image.size
    return pack(image.tobytes(), width, height, threshold=threshold)
