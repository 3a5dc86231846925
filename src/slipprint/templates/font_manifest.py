"""Font manifest mapping family names and styles to font files.

Reads family, weight and slant from TTF/OTF metadata so that a CSS-like
request such as ``("Tahoma", bold=True)`` resolves to the right file even
when file names follow no convention.
"""

import json
import logging
from pathlib import Path

from fontTools.ttLib import TTFont

logger = logging.getLogger(__name__)

MANIFEST_FILE = "fonts.json"

# OpenType name table IDs
NAME_ID_FAMILY = 1
NAME_ID_SUBFAMILY = 2
NAME_ID_TYPOGRAPHIC_FAMILY = 16
NAME_ID_TYPOGRAPHIC_SUBFAMILY = 17

# usWeightClass at or above this counts as bold
BOLD_WEIGHT = 600

ITALIC_NAMES = ["italic", "oblique"]

STYLES = ("regular", "bold", "italic", "bold_italic")


def style_key(bold: bool, italic: bool) -> str:
    """Manifest style key for a weight/slant combination."""
    if bold and italic:
        return "bold_italic"
    if bold:
        return "bold"
    if italic:
        return "italic"
    return "regular"


def family_key(family: str) -> str:
    """Normalize a family name for lookup (case and spaces ignored)."""
    return family.replace(" ", "").lower()


def read_font_metadata(font_path: Path) -> dict | None:
    """Read family, weight and slant from a font file.

    Returns:
        Dictionary with ``family``, ``weight``, ``is_italic`` and ``file``,
        or None if the file cannot be read.
    """
    try:
        with TTFont(font_path, lazy=True) as font:
            name_table = font["name"]

            def get_name(name_id: int) -> str | None:
                record = name_table.getName(name_id, 3, 1, 0x409)  # Windows, Unicode, English
                if record is None:
                    record = name_table.getName(name_id, 1, 0, 0)  # Mac, Roman, English
                return str(record) if record is not None else None

            family = get_name(NAME_ID_TYPOGRAPHIC_FAMILY) or get_name(NAME_ID_FAMILY)
            subfamily = get_name(NAME_ID_TYPOGRAPHIC_SUBFAMILY) or get_name(NAME_ID_SUBFAMILY) or ""

            weight = 400
            is_italic = any(name in subfamily.lower() for name in ITALIC_NAMES)
            if "OS/2" in font:
                os2_table = font["OS/2"]
                weight = getattr(os2_table, "usWeightClass", 400)
                # fsSelection bit 0 = italic
                is_italic = is_italic or bool(getattr(os2_table, "fsSelection", 0) & 1)
            if "bold" in subfamily.lower():
                weight = max(weight, 700)

    except Exception as e:
        logger.warning(f"Failed to read font metadata from {font_path}: {e}")
        return None

    if not family:
        return None

    return {
        "family": family,
        "weight": weight,
        "is_italic": is_italic,
        "file": font_path.name,
    }


def build_font_manifest(fonts_dir: Path) -> dict[str, dict[str, str]]:
    """Build a manifest for every font in a directory.

    Returns:
        Mapping of normalized family name to ``{style: filename}``. When
        two files claim the same family and style, the one whose weight is
        closest to 400 (regular) or 700 (bold) wins.
    """
    manifest: dict[str, dict[str, str]] = {}
    distance: dict[tuple[str, str], int] = {}

    if not fonts_dir.exists():
        return manifest

    for font_file in sorted(fonts_dir.glob("*.[ot]tf")):
        metadata = read_font_metadata(font_file)
        if not metadata:
            continue

        weight = metadata["weight"]
        bold = weight >= BOLD_WEIGHT
        style = style_key(bold, metadata["is_italic"])
        key = family_key(metadata["family"])
        off = abs(weight - (700 if bold else 400))

        if (key, style) in distance and distance[(key, style)] <= off:
            continue
        manifest.setdefault(key, {})[style] = font_file.name
        distance[(key, style)] = off
        logger.debug(f"Mapped '{metadata['family']}' {style} -> {font_file.name}")

    return manifest


def save_manifest(manifest: dict[str, dict[str, str]], fonts_dir: Path) -> None:
    """Save font manifest to JSON file."""
    manifest_path = fonts_dir / MANIFEST_FILE
    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2, sort_keys=True)
    logger.info(f"Saved font manifest with {len(manifest)} families to {manifest_path}")


def load_manifest(fonts_dir: Path) -> dict[str, dict[str, str]]:
    """Load font manifest from JSON file.

    Returns:
        Family to style map, or empty dict if missing or unreadable.
    """
    manifest_path = fonts_dir / MANIFEST_FILE
    if not manifest_path.exists():
        return {}

    try:
        with open(manifest_path) as f:
            return json.load(f)
    except Exception as e:
        logger.warning(f"Failed to load font manifest: {e}")
        return {}


def update_manifest(fonts_dir: Path) -> dict[str, dict[str, str]]:
    """Rebuild and save the font manifest for a directory."""
    manifest = build_font_manifest(fonts_dir)
    if manifest:
        save_manifest(manifest, fonts_dir)
    return manifest
