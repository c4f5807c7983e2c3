import logging
import os
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

IMAGE_FETCH_TIMEOUT = float(os.getenv("IMAGE_FETCH_TIMEOUT", "30"))

logger = logging.getLogger(__name__)


class ImageSourceError(OSError):
    """An image reference could not be resolved to bytes."""


def is_remote(ref: str) -> bool:
    return ref.startswith(("http://", "https://"))


def file_url_to_path(ref: str) -> Path:
    """file:///a/b%20c.jpg?t=1 -> /a/b c.jpg (query dropped)."""
    parsed = urlparse(ref)
    local = url2pathname(parsed.path)
    if parsed.netloc and parsed.netloc != "localhost":
        # UNC share: file://server/share/x.jpg
        local = f"//{parsed.netloc}{local}"
    return Path(local)


class ImageSourceRepository:
    """
    Resolves image references stored in project slots to raw bytes.
    Callable, so an instance can be handed to exporters as the bytes provider.
    """

    def __init__(
        self,
        base_dir: Union[str, Path, None] = None,
        *,
        timeout: float = IMAGE_FETCH_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_dir = Path(base_dir) if base_dir else None
        self.timeout = timeout
        self.session = session or requests.Session()

    def resolve_local_path(self, ref: str) -> Path:
        if ref.startswith("file:"):
            return file_url_to_path(ref)
        # Slots written by the desktop app carry a ?t= cache-buster.
        path = Path(ref.split("?", 1)[0])
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path

    def fetch(self, ref: str) -> bytes:
        if not ref:
            raise ImageSourceError("Empty image reference")

        if is_remote(ref):
            try:
                resp = self.session.get(ref, timeout=self.timeout)
                resp.raise_for_status()
            except requests.exceptions.RequestException as e:
                raise ImageSourceError(f"Failed to download {ref}: {e}") from e
            return resp.content

        path = self.resolve_local_path(ref)
        if not path.is_file():
            raise ImageSourceError(f"Image file not found: {path}")
        return path.read_bytes()

    __call__ = fetch
