# storefront/services/images.py
from __future__ import annotations

import os
import secrets
import time

from flask import current_app
from PIL import Image, ImageOps, UnidentifiedImageError
from werkzeug.utils import secure_filename

from storefront.errors import ImageProcessingError

# HEIC (iPhone) support is optional: register the decoder when pillow-heif is installed
try:
    import pillow_heif  # type: ignore
    pillow_heif.register_heif_opener()
except ImportError:
    pass

UPLOADS_URL_PREFIX = "/uploads/"
ATTENTION_STEPS = 8


def attention_crop(img: Image.Image, box: tuple[int, int]) -> Image.Image:
    """
    Cover ``box``: scale down until one side fits, then keep the window with
    the most detail (highest grey-level entropy) along the overflowing side.
    Images smaller than the box are never enlarged.
    """
    tw, th = box
    w, h = img.size
    scale = max(tw / w, th / h)
    if scale < 1:
        img = img.resize((max(tw, round(w * scale)), max(th, round(h * scale))), Image.Resampling.LANCZOS)
        w, h = img.size

    cw, ch = min(tw, w), min(th, h)
    if (cw, ch) == (w, h):
        return img

    best, best_score = (0, 0), -1.0
    for i in range(ATTENTION_STEPS + 1):
        left = (w - cw) * i // ATTENTION_STEPS
        top = (h - ch) * i // ATTENTION_STEPS
        score = img.crop((left, top, left + cw, top + ch)).convert("L").entropy()
        if score > best_score:
            best, best_score = (left, top), score
    left, top = best
    return img.crop((left, top, left + cw, top + ch))


def _flatten(img: Image.Image, fmt: str) -> Image.Image:
    """JPEG has no alpha channel: paste onto white."""
    if fmt != "JPEG" or img.mode in ("RGB", "L"):
        return img
    if img.mode in ("RGBA", "LA", "P"):
        img = img.convert("RGBA")
        bg = Image.new("RGB", img.size, (255, 255, 255))
        bg.paste(img, mask=img.split()[-1])
        return bg
    return img.convert("RGB")


class ImageService:
    """Resizes uploaded images and stores them under collision-resistant names."""

    def __init__(self, upload_dir: str, max_size: int = 800, mode: str = "inside"):
        self.upload_dir = upload_dir
        self.max_size = max_size
        self.mode = mode

    def fit(self, img: Image.Image) -> Image.Image:
        box = (self.max_size, self.max_size)
        if self.mode == "cover":
            return attention_crop(img, box)
        # thumbnail() keeps the aspect ratio and never upscales
        img.thumbnail(box, Image.Resampling.LANCZOS)
        return img

    @staticmethod
    def unique_name(field: str, ext: str) -> str:
        return f"{field}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"

    def save_upload(self, fs, field: str = "image") -> str:
        """Resize one uploaded file into the uploads folder; returns its public URL."""
        os.makedirs(self.upload_dir, exist_ok=True)
        ext = os.path.splitext(secure_filename(fs.filename or ""))[1].lower()
        tmp_path = None
        try:
            with Image.open(fs.stream if hasattr(fs, "stream") else fs) as src:
                fmt = Image.registered_extensions().get(ext)
                if fmt is None:
                    fmt = src.format or "PNG"
                    ext = "." + fmt.lower()
                img = ImageOps.exif_transpose(src)
                img = _flatten(self.fit(img), fmt)

                name = self.unique_name(field, ext)
                tmp_path = os.path.join(self.upload_dir, "resized-" + name)
                save_kwargs = {"quality": 85} if fmt in ("JPEG", "WEBP") else {}
                img.save(tmp_path, format=fmt, **save_kwargs)

            final_path = os.path.join(self.upload_dir, name)
            os.replace(tmp_path, final_path)
            tmp_path = None
        except (UnidentifiedImageError, OSError, ValueError) as e:
            current_app.logger.exception("[UPLOAD] image processing failed for %r", fs.filename)
            raise ImageProcessingError() from e
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

        current_app.logger.info("[UPLOAD] stored %s (%sx%s)", name, *img.size)
        return UPLOADS_URL_PREFIX + name

    def discard(self, url: str) -> None:
        if not url or not url.startswith(UPLOADS_URL_PREFIX):
            return
        path = os.path.join(self.upload_dir, secure_filename(url[len(UPLOADS_URL_PREFIX):]))
        if os.path.exists(path):
            os.remove(path)
            current_app.logger.info("[UPLOAD] discarded %s", path)
