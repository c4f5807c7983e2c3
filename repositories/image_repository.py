from io import BytesIO
from pathlib import Path
import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv
import os
from models.image import Image

# Load environment variables
load_dotenv()

_PIL_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".webp": "WEBP",
    ".bmp": "BMP",
    ".gif": "GIF",
}


class ImageRepository:
    """
    Decode / resize / encode for Image entities.
    OpenCV reads and scales, Pillow writes.
    """
    def __init__(self):
        self.JPEG_QUALITY = int(os.getenv("JPEG_QUALITY", "95"))

    @staticmethod
    def decode(data: bytes, source: str = None) -> Image:
        if not data:
            raise ValueError(f"Empty image data: {source}")
        buf = np.frombuffer(data, dtype=np.uint8)
        try:
            arr_bgr = cv2.imdecode(buf, cv2.IMREAD_COLOR)
        except cv2.error as err:
            raise ValueError(f"Image not decodable: {source}: {err}") from err
        if arr_bgr is None:
            raise ValueError(f"Image not decodable: {source}")
        return Image(pixels=np.ascontiguousarray(arr_bgr[:, :, ::-1]), source=source)

    @staticmethod
    def resize(image: Image, width: int, height: int) -> Image:
        # Callers only ever shrink.
        new_pixels = cv2.resize(image.pixels, (width, height), interpolation=cv2.INTER_AREA)
        return Image(pixels=new_pixels, source=image.source)

    def encode(self, image: Image, fmt: str = "JPEG", quality: int = None) -> bytes:
        pixels = image.pixels
        if not pixels.flags['C_CONTIGUOUS']:
            pixels = np.ascontiguousarray(pixels)
        buffer = BytesIO()
        pil_image = PILImage.fromarray(pixels)
        if fmt == "JPEG":
            pil_image.save(buffer, format=fmt, quality=quality or self.JPEG_QUALITY)
        else:
            pil_image.save(buffer, format=fmt)
        return buffer.getvalue()

    @staticmethod
    def format_for(name: str) -> str:
        return _PIL_FORMATS.get(Path(name).suffix.lower(), "JPEG")
