import zipfile
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Iterable, Tuple, Union

ArchiveEntry = Tuple[str, Union[bytes, str]]


class ZipArchiveWriter:
    """
    Packs (path, bytes) entries into a single in-memory zip.
    Callable, so an instance can be handed to exporters as the archive writer.
    """

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self.compression = compression

    def write(self, entries: Iterable[ArchiveEntry]) -> bytes:
        buffer = BytesIO()
        with zipfile.ZipFile(buffer, "w", self.compression) as zf:
            for name, data in entries:
                zf.writestr(name, data)
        return buffer.getvalue()

    __call__ = write

    @staticmethod
    def archive_name(project_name: str, kind: str, now: datetime = None, ext: str = ".zip") -> str:
        """`<project>_<kind>_<YYYY-MM-DD_HH-MM-SS><ext>`."""
        now = now or datetime.now()
        stamp = now.strftime("%Y-%m-%d_%H-%M-%S")
        return f"{project_name or 'dataset'}_{kind}_{stamp}{ext}"

    @staticmethod
    def save(data: bytes, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path
