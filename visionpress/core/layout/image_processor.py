"""Image fitting and compositing for rendered pages."""

import logging
from typing import Tuple

from PIL import Image, ImageDraw

logger = logging.getLogger(__name__)

Rect = Tuple[int, int, int, int]


class ImageProcessor:
    """
    Fits images into page boxes.

    Fit modes:
    - contain: scale to fit inside the box, preserving aspect ratio
    - cover: scale to cover the box and center-crop the excess
    - fill: stretch to the exact box size
    """

    @staticmethod
    def fit(img: Image.Image, target_w: int, target_h: int, fit_mode: str = "contain") -> Image.Image:
        """Apply the specified fit mode to the image."""
        target_w, target_h = max(1, int(target_w)), max(1, int(target_h))
        if img.mode != "RGBA":
            img = img.convert("RGBA")

        if fit_mode == "fill":
            return img.resize((target_w, target_h), Image.Resampling.LANCZOS)

        if fit_mode == "cover":
            img_ratio = img.width / img.height
            target_ratio = target_w / target_h
            if img_ratio > target_ratio:
                # Image is wider, scale by height
                new_h = target_h
                new_w = max(target_w, int(img.width * (target_h / img.height)))
            else:
                new_w = target_w
                new_h = max(target_h, int(img.height * (target_w / img.width)))
            img = img.resize((new_w, new_h), Image.Resampling.LANCZOS)
            left = (new_w - target_w) // 2
            top = (new_h - target_h) // 2
            return img.crop((left, top, left + target_w, top + target_h))

        # contain
        scale = min(target_w / img.width, target_h / img.height)
        new_size = (max(1, int(img.width * scale)), max(1, int(img.height * scale)))
        return img.resize(new_size, Image.Resampling.LANCZOS)

    @staticmethod
    def paste_fitted(canvas: Image.Image, img: Image.Image, box: Rect, fit_mode: str = "contain") -> Rect:
        """
        Fit ``img`` into ``box`` (x, y, w, h) and paste it centered.

        Returns:
            The rect actually covered by the image
        """
        x, y, w, h = box
        fitted = ImageProcessor.fit(img, w, h, fit_mode)
        px = x + (w - fitted.width) // 2
        py = y + (h - fitted.height) // 2
        canvas.paste(fitted, (px, py), fitted)
        return (px, py, fitted.width, fitted.height)

    @staticmethod
    def overlay(canvas: Image.Image, box: Rect, color=(0, 0, 0), opacity: float = 0.4) -> None:
        """Darken a region with a translucent fill."""
        x, y, w, h = box
        alpha = int(max(0.0, min(1.0, opacity)) * 255)
        layer = Image.new("RGBA", (max(1, w), max(1, h)), (*color, alpha))
        canvas.paste(layer, (x, y), layer)

    @staticmethod
    def draw_placeholder(draw: ImageDraw.ImageDraw, box: Rect, label: str, font,
                         fill=(240, 240, 240), outline=(200, 200, 200), text_color=(150, 150, 150),
                         line_width: int = 2) -> None:
        """Outlined box with a centered label, drawn where an image could not be loaded."""
        x, y, w, h = box
        draw.rectangle([x, y, x + w, y + h], fill=fill, outline=outline, width=line_width)
        text_w = draw.textlength(label, font=font)
        ascent, descent = font.getmetrics()
        draw.text((x + (w - text_w) / 2, y + (h - ascent - descent) / 2), label, fill=text_color, font=font)
