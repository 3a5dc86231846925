"""Tests for font management."""

import tempfile
from pathlib import Path

from PIL import ImageFont

from slipprint.templates.fonts import FontFace, FontManager, get_font_manager, split_families


class TestSplitFamilies:
    """Tests for CSS-style family lists."""

    def test_split_and_strip_quotes(self):
        """Names are split on commas with quotes removed."""
        assert split_families('Tahoma, "Liberation Sans", sans-serif') == [
            "Tahoma",
            "Liberation Sans",
            "sans-serif",
        ]

    def test_empty_entries_dropped(self):
        """Blank entries are ignored."""
        assert split_families("Arial,, ") == ["Arial"]


class TestFontManager:
    """Tests for FontManager."""

    def test_get_font_returns_font(self):
        """Getting a font should return a PIL font object."""
        manager = FontManager()
        face = manager.resolve("Arial, sans-serif")
        font = manager.get_font(face, 12)

        assert isinstance(font, (ImageFont.FreeTypeFont, ImageFont.ImageFont))

    def test_get_font_caches_result(self):
        """Getting the same face and size twice returns the cached font."""
        manager = FontManager()
        face = manager.resolve("Arial")

        assert manager.get_font(face, 12) is manager.get_font(face, 12)

    def test_unknown_font_falls_back_to_default(self):
        """Unknown font names resolve to no file and still load a font."""
        manager = FontManager()
        face = manager.resolve("NonExistentFontName12345")

        assert face == FontFace(None, False, False)
        assert manager.get_font(face, 12) is not None

    def test_resolve_caches(self):
        """Resolution is cached per family and style."""
        manager = FontManager()
        manager.resolve("NonExistentFontName12345", bold=True)
        assert ("NonExistentFontName12345", True, False) in manager._face_cache

    def test_custom_dir_styles(self):
        """File name conventions select styled faces in custom dirs."""
        with tempfile.TemporaryDirectory() as tmpdir:
            for name in ("Slab.ttf", "Slab-Bold.ttf"):
                (Path(tmpdir) / name).write_bytes(b"")
            manager = FontManager(custom_paths=[tmpdir])

            regular = manager.resolve("Slab")
            bold = manager.resolve("Slab", bold=True)
            italic = manager.resolve("Slab", italic=True)

            assert regular == FontFace(Path(tmpdir) / "Slab.ttf", False, False)
            assert bold == FontFace(Path(tmpdir) / "Slab-Bold.ttf", True, False)
            # No italic file: regular face, italic left to synthesize
            assert italic == FontFace(Path(tmpdir) / "Slab.ttf", False, False)

    def test_bold_italic_falls_back_to_bold(self):
        """A missing bold italic face uses the bold face."""
        with tempfile.TemporaryDirectory() as tmpdir:
            for name in ("Slab.ttf", "Slab-Bold.ttf"):
                (Path(tmpdir) / name).write_bytes(b"")
            manager = FontManager(custom_paths=[tmpdir])

            face = manager.resolve("Slab", bold=True, italic=True)

            assert face == FontFace(Path(tmpdir) / "Slab-Bold.ttf", True, False)

    def test_first_resolving_family_wins(self):
        """Families are tried in list order."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "Second.ttf").write_bytes(b"")
            manager = FontManager(custom_paths=[tmpdir])

            face = manager.resolve("Missing12345, Second")

            assert face.path == Path(tmpdir) / "Second.ttf"

    def test_manifest_lookup(self):
        """Manifest entries map family and style to files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "xyz-700.ttf").write_bytes(b"")
            (Path(tmpdir) / "fonts.json").write_text('{"mybrand": {"bold": "xyz-700.ttf"}}')
            manager = FontManager(custom_paths=[tmpdir])

            assert manager._find_font("My Brand", "bold") == Path(tmpdir) / "xyz-700.ttf"

    def test_unreadable_font_file_uses_default(self):
        """A file that is not a font falls back to the default font."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "Broken.ttf").write_bytes(b"not a font")
            manager = FontManager(custom_paths=[tmpdir])

            font = manager.get_font(manager.resolve("Broken"), 20)

            assert font is not None

    def test_clear_cache(self):
        """Clear cache should remove cached fonts."""
        manager = FontManager()
        manager.get_font(manager.resolve("Arial"), 12)

        manager.clear_cache()

        assert len(manager._cache) == 0
        assert len(manager._face_cache) == 0


class TestGetFontManager:
    """Tests for the shared manager."""

    def test_default_is_shared(self):
        """Without custom paths the same manager is reused."""
        assert get_font_manager() is get_font_manager()

    def test_custom_paths_get_new_manager(self):
        """Custom paths create a dedicated manager."""
        with tempfile.TemporaryDirectory() as tmpdir:
            manager = get_font_manager([tmpdir])
            assert manager is not get_font_manager()
            assert Path(tmpdir) in manager._custom_paths
