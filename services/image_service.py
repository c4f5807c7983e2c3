import re
from typing import Tuple
from urllib.parse import unquote

from models.image import Image
from repositories.image_repository import ImageRepository

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
_EXTENSION = re.compile(r"\.[^.]+$")


class ImageService:
    """Decode / scale / re-encode helpers and file-name rules for exports."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def decode(self, data: bytes, source: str = None) -> Image:
        return self.image_repository.decode(data, source)

    @staticmethod
    def fit_size(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
        """
        Target size that fits inside max_width x max_height, aspect preserved.
        Images already inside the bound keep their size (never upscaled).
        """
        if width <= max_width and height <= max_height:
            return width, height
        scale = min(max_width / width, max_height / height)
        return max(1, int(width * scale + 0.5)), max(1, int(height * scale + 0.5))

    def fit_within(self, img: Image, max_dim: int) -> Image:
        target_w, target_h = self.fit_size(img.width, img.height, max_dim, max_dim)
        if (target_w, target_h) == (img.width, img.height):
            return img
        return self.image_repository.resize(img, target_w, target_h)

    def to_jpeg_bytes(self, img: Image, quality: int) -> bytes:
        return self.image_repository.encode(img, fmt="JPEG", quality=quality)

    def to_format_bytes(self, img: Image, name: str) -> bytes:
        """Encode in the format implied by *name*'s extension."""
        return self.image_repository.encode(img, fmt=self.image_repository.format_for(name))

    @staticmethod
    def base_name(ref: str) -> str:
        """
        Last path component of a slot reference, without query string.
        file:///x/My%20Pic.jpg?t=1 -> My Pic.jpg
        """
        clean = ref.split("?", 1)[0].replace("\\", "/")
        return unquote(clean.rsplit("/", 1)[-1])

    def sanitize_base_name(self, ref: str) -> str:
        base = self.base_name(ref) or "image.jpg"
        return _UNSAFE_CHARS.sub("_", base)

    def gallery_file_name(self, ref: str) -> str:
        """Sanitised base name with its extension forced to .jpg."""
        name = self.sanitize_base_name(ref)
        if _EXTENSION.search(name):
            return _EXTENSION.sub(".jpg", name)
        return f"{name}.jpg"

    @staticmethod
    def caption_name(file_name: str) -> str:
        """a.jpg -> a.txt"""
        if _EXTENSION.search(file_name):
            return _EXTENSION.sub(".txt", file_name)
        return f"{file_name}.txt"
