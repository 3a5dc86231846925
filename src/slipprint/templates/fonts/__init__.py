"""Font resolution for the Pillow rasterizer."""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import NamedTuple

from PIL import ImageFont

from slipprint.templates.font_manifest import family_key, load_manifest, style_key

logger = logging.getLogger(__name__)

# Common system font directories by platform
SYSTEM_FONT_DIRS = [
    # Linux
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
    Path.home() / ".local/share/fonts",
    # macOS
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path.home() / "Library/Fonts",
    # Windows
    Path("C:/Windows/Fonts"),
]

# CSS generic families mapped to fonts commonly installed on print hosts
GENERIC_FAMILIES = {
    "sans-serif": "DejaVuSans",
    "serif": "DejaVuSerif",
    "monospace": "DejaVuSansMono",
    "system-ui": "DejaVuSans",
}

# Font name aliases for common fonts
FONT_ALIASES = {
    "dejavu": "DejaVuSans",
    "dejavu sans": "DejaVuSans",
    "arial": "Arial",
    "helvetica": "Helvetica",
    "tahoma": "Tahoma",
    "times": "Times New Roman",
    "courier": "Courier New",
}

# File name suffixes tried for each style, covering the DejaVu/Liberation
# "-Bold" convention and the Windows "arialbd.ttf" convention
STYLE_SUFFIXES = {
    "regular": ["", "-Regular", "Regular"],
    "bold": ["-Bold", "Bold", "bd", "-Bd"],
    "italic": ["-Italic", "-Oblique", "Italic", "i"],
    "bold_italic": ["-BoldItalic", "-BoldOblique", "BoldItalic", "bi", "z"],
}

FONT_EXTENSIONS = [".ttf", ".otf", ".TTF", ".OTF"]


class FontFace(NamedTuple):
    """A resolved font file and whether it carries the requested style."""

    path: Path | None
    bold: bool
    italic: bool


def split_families(font_family: str) -> list[str]:
    """Split a CSS-style family list into individual names.

    ``'Tahoma, "Liberation Sans", sans-serif'`` gives
    ``["Tahoma", "Liberation Sans", "sans-serif"]``.
    """
    families = []
    for part in font_family.split(","):
        name = part.strip().strip("'\"").strip()
        if name:
            families.append(name)
    return families


class FontManager:
    """Resolves family lists and styles to fonts, with caching.

    Search order per family:
    1. Font manifests in custom paths (maps metadata family/style to files)
    2. File name conventions in custom paths
    3. File name conventions in system font directories

    When no family in the list resolves, Pillow's default font is used.
    """

    def __init__(self, custom_paths: Sequence[str | Path] | None = None) -> None:
        """Initialize font manager.

        Args:
            custom_paths: Additional paths to search for fonts (directories or files).
        """
        self._custom_paths = [Path(p) for p in (custom_paths or [])]
        self._cache: dict[tuple[str, float], ImageFont.FreeTypeFont | ImageFont.ImageFont] = {}
        self._face_cache: dict[tuple[str, bool, bool], FontFace] = {}
        self._manifests: dict[Path, dict[str, dict[str, str]]] = {}
        self._load_manifests()

    def _load_manifests(self) -> None:
        """Load font manifests from custom paths."""
        for custom_path in self._custom_paths:
            if custom_path.is_dir():
                manifest = load_manifest(custom_path)
                if manifest:
                    self._manifests[custom_path] = manifest
                    logger.debug(f"Loaded font manifest from {custom_path} with {len(manifest)} families")

    def resolve(self, font_family: str, bold: bool = False, italic: bool = False) -> FontFace:
        """Resolve a family list and style to a font file.

        A styled face is preferred; failing that the family's regular face
        is returned with the missing style flags cleared so the caller can
        synthesize them.

        Args:
            font_family: Family name, file path, or CSS-style family list.
            bold: Whether a bold face is wanted.
            italic: Whether an italic face is wanted.

        Returns:
            FontFace, with ``path=None`` when nothing was found.
        """
        cache_key = (font_family, bold, italic)
        if cache_key in self._face_cache:
            return self._face_cache[cache_key]

        face = FontFace(None, False, False)
        wanted = style_key(bold, italic)
        fallbacks = [wanted]
        if wanted == "bold_italic":
            fallbacks += ["bold", "italic"]
        if wanted != "regular":
            fallbacks.append("regular")

        for name in split_families(font_family):
            found = None
            for style in fallbacks:
                path = self._find_font(name, style)
                if path:
                    found = FontFace(path, bold and "bold" in style, italic and "italic" in style)
                    break
            if found:
                face = found
                break

        if face.path is None:
            logger.warning(f"Font '{font_family}' not found, using PIL default")
        self._face_cache[cache_key] = face
        return face

    def get_font(self, face: FontFace, size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        """Load a resolved face at a given size.

        Args:
            face: Result of ``resolve()``.
            size: Font size (em size in pixels).

        Returns:
            PIL font object
        """
        cache_key = (str(face.path) if face.path else "", size)
        if cache_key in self._cache:
            return self._cache[cache_key]

        font: ImageFont.FreeTypeFont | ImageFont.ImageFont
        if face.path is None:
            font = ImageFont.load_default(size)
        else:
            try:
                font = ImageFont.truetype(str(face.path), size)
            except OSError as e:
                logger.warning(f"Failed to load font {face.path}: {e}")
                font = ImageFont.load_default(size)

        self._cache[cache_key] = font
        return font

    def _find_in_manifest(self, name: str, style: str) -> Path | None:
        """Look up a family and style in the loaded manifests."""
        key = family_key(name)
        for fonts_dir, manifest in self._manifests.items():
            filename = manifest.get(key, {}).get(style)
            if filename:
                font_path = fonts_dir / filename
                if font_path.exists():
                    return font_path
        return None

    def _find_font(self, name: str, style: str = "regular") -> Path | None:
        """Find a font file for one family name and style.

        Args:
            name: Family name, alias, generic family, or path to a font file.
            style: One of ``regular``, ``bold``, ``italic``, ``bold_italic``.

        Returns:
            Path to font file, or None if not found
        """
        if "/" in name or "\\" in name:
            font_path = Path(name)
            if style == "regular" and font_path.exists():
                return font_path
            return None

        name = GENERIC_FAMILIES.get(name.lower(), name)
        name = FONT_ALIASES.get(name.lower(), name)

        manifest_result = self._find_in_manifest(name, style)
        if manifest_result:
            logger.debug(f"Found font '{name}' {style} via manifest: {manifest_result}")
            return manifest_result

        # "Liberation Sans" -> ["Liberation Sans", "LiberationSans", "liberationsans"]
        bases = [name]
        if " " in name:
            bases.append(name.replace(" ", ""))
        bases.append(name.replace(" ", "").lower())
        stems = [f"{base}{suffix}" for base in bases for suffix in STYLE_SUFFIXES[style]]

        for custom_path in self._custom_paths:
            if custom_path.is_dir():
                found = self._search_dir(custom_path, stems, recursive=False)
                if found:
                    return found
                for subdir in sorted(custom_path.iterdir()):
                    if subdir.is_dir():
                        found = self._search_dir(subdir, stems, recursive=False)
                        if found:
                            return found
            elif custom_path.is_file() and custom_path.stem in stems:
                return custom_path

        for sys_dir in SYSTEM_FONT_DIRS:
            if not sys_dir.exists():
                continue
            found = self._search_dir(sys_dir, stems, recursive=True)
            if found:
                return found

        return None

    def _search_dir(self, directory: Path, stems: list[str], recursive: bool) -> Path | None:
        """Find the first ``<stem><ext>`` in a directory, in stem order."""
        for stem in stems:
            for ext in FONT_EXTENSIONS:
                font_file = directory / f"{stem}{ext}"
                if font_file.exists():
                    logger.debug(f"Found font '{stem}' at {font_file}")
                    return font_file

        if not recursive:
            return None

        for stem in stems:
            try:
                for font_file in sorted(directory.rglob(f"{stem}.*")):
                    if font_file.suffix.lower() in (".ttf", ".otf"):
                        logger.debug(f"Found font '{stem}' at {font_file}")
                        return font_file
            except PermissionError:
                continue
        return None

    def clear_cache(self) -> None:
        """Clear the font caches and reload manifests."""
        self._cache.clear()
        self._face_cache.clear()
        self._manifests.clear()
        self._load_manifests()


# Default font manager instance
_default_manager: FontManager | None = None


def get_font_manager(custom_paths: Sequence[str | Path] | None = None) -> FontManager:
    """Get or create font manager.

    Args:
        custom_paths: Additional paths to search for fonts.

    Returns:
        FontManager instance
    """
    global _default_manager

    if custom_paths:
        return FontManager(custom_paths)

    if _default_manager is None:
        _default_manager = FontManager()

    return _default_manager
