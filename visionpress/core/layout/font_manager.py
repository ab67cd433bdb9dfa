"""
Font discovery and loading for page rendering.

Scans the platform's font directories once, then resolves generic families
(serif, sans-serif) to concrete TrueType files. Falls back to Pillow's
bundled default font when nothing suitable is installed.
"""

import logging
import platform
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from PIL import ImageFont

logger = logging.getLogger(__name__)

GENERIC_FAMILIES = {
    "serif": ["DejaVuSerif", "LiberationSerif", "Georgia", "Times New Roman", "times", "NotoSerif"],
    "sans-serif": ["DejaVuSans", "LiberationSans", "Arial", "Helvetica", "arial", "NotoSans"],
}


class FontManager:
    """
    Resolves font families to files and loads PIL fonts.

    Args:
        custom_dirs: Additional directories to scan for fonts
    """

    def __init__(self, custom_dirs: Optional[List[Path]] = None):
        self.custom_dirs = custom_dirs or []
        self._families: Optional[Dict[str, List[Path]]] = None
        self._fonts: Dict[tuple, ImageFont.ImageFont] = {}

    def _get_system_font_dirs(self) -> List[Path]:
        """Get platform-specific system font directories."""
        system = platform.system()

        if system == "Windows":
            return [
                Path("C:/Windows/Fonts"),
                Path.home() / "AppData/Local/Microsoft/Windows/Fonts"
            ]
        elif system == "Darwin":  # macOS
            return [
                Path("/System/Library/Fonts"),
                Path("/Library/Fonts"),
                Path.home() / "Library/Fonts"
            ]
        else:  # Linux and others
            return [
                Path("/usr/share/fonts"),
                Path("/usr/local/share/fonts"),
                Path.home() / ".fonts",
                Path.home() / ".local/share/fonts"
            ]

    def discover_fonts(self) -> Dict[str, List[Path]]:
        """Map family names (file stem before the first '-') to font files."""
        families: Dict[str, List[Path]] = {}
        for font_dir in self._get_system_font_dirs() + list(self.custom_dirs):
            if not font_dir.exists():
                continue
            logger.debug(f"Scanning font directory: {font_dir}")
            for ext in ("*.ttf", "*.otf", "*.TTF", "*.OTF"):
                for font_file in font_dir.rglob(ext):
                    family = font_file.stem.split("-")[0]
                    families.setdefault(family, []).append(font_file)
        logger.info(f"Font discovery complete. Found {len(families)} families.")
        return families

    @property
    def families(self) -> Dict[str, List[Path]]:
        if self._families is None:
            self._families = self.discover_fonts()
        return self._families

    def select_font_file(self, families: List[str], bold: bool = False) -> Optional[Path]:
        """
        First installed file for a priority-ordered family list.

        Generic names (``serif``, ``sans-serif``) expand to common families.
        """
        candidates: List[str] = []
        for family in families:
            candidates.extend(GENERIC_FAMILIES.get(family, [family]))

        lowered = {name.lower(): files for name, files in self.families.items()}
        for family in candidates:
            files = lowered.get(family.lower())
            if not files:
                continue
            return _pick_variant(files, bold)
        return None

    def pil_font(self, family: str, size_px: int, bold: bool = False) -> ImageFont.ImageFont:
        """
        Load a PIL font for a family and pixel size.

        Returns:
            FreeType font, or Pillow's default font if no match is installed
        """
        size_px = max(1, int(size_px))
        key = (family, size_px, bold)
        if key in self._fonts:
            return self._fonts[key]

        font = None
        font_path = self.select_font_file([family], bold)
        if font_path is not None:
            try:
                font = ImageFont.truetype(str(font_path), size_px)
            except OSError as e:
                logger.warning(f"Failed to load font {font_path}: {e}")
        if font is None:
            logger.debug(f"Using default font for {family}")
            font = ImageFont.load_default(size=size_px)

        self._fonts[key] = font
        return font


def _pick_variant(files: List[Path], bold: bool) -> Path:
    def is_bold(path: Path) -> bool:
        return "bold" in path.stem.lower()

    def is_italic(path: Path) -> bool:
        stem = path.stem.lower()
        return "italic" in stem or "oblique" in stem

    upright = [f for f in sorted(files) if not is_italic(f)] or sorted(files)
    matching = [f for f in upright if is_bold(f) == bold]
    return (matching or upright)[0]


@lru_cache(maxsize=1)
def default_font_manager() -> FontManager:
    return FontManager()
