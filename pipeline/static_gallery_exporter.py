"""
Static Gallery Exporter
Re-encodes every image of a project into a self-contained zip:
index.html with a lightbox viewer, images/*.jpg and project.json.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Tuple

from dotenv import load_dotenv
from jinja2 import Environment, FileSystemLoader, select_autoescape

from models.project import Project, ordered_sections, section_cols
from repositories.archive_repository import ZipArchiveWriter
from repositories.image_source_repository import ImageSourceRepository
from services.image_service import ImageService
from services.project_service import ProjectService

# Load environment variables
load_dotenv()

GALLERY_MAX_DIM = int(os.getenv("GALLERY_MAX_DIM", "3072"))
GALLERY_JPEG_QUALITY = int(os.getenv("GALLERY_JPEG_QUALITY", "80"))
TEMPLATE_DIR = Path(__file__).parent / "templates"

logger = logging.getLogger(__name__)

ImageBytesProvider = Callable[[str], bytes]
ArchiveWriter = Callable[[Iterable[Tuple[str, bytes]]], bytes]

_jinja = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


@dataclass
class ProcessedImage:
    filename: str
    section: str
    caption: str
    index: int  # global index for lightbox navigation
    data: bytes


def allocate_name(base_name: str, used: Dict[str, int]) -> str:
    """
    Collision-safe file name: a.jpg, then a_2.jpg, a_3.jpg, ...
    *used* maps every name handed out so far to its collision counter.
    """
    if base_name not in used:
        used[base_name] = 1
        return base_name
    stem, ext = os.path.splitext(base_name)
    while True:
        used[base_name] += 1
        candidate = f"{stem}_{used[base_name]}{ext}"
        if candidate not in used:
            used[candidate] = 1
            return candidate


def allocate_pair(base_name: str, used: Dict[str, int]) -> Tuple[str, str]:
    """
    Image name plus its caption name, unique as a pair within one folder:
    a.jpg then a.png give (a.jpg, a.txt) and (a_2.png, a_2.txt).
    *used* maps every reserved stem to its collision counter.
    """
    stem, ext = os.path.splitext(base_name)
    candidate = stem
    while candidate in used:
        used[stem] = used.get(stem, 1) + 1
        candidate = f"{stem}_{used[stem]}"
    used[candidate] = 1
    return f"{candidate}{ext}", f"{candidate}.txt"


def render_gallery_html(project: Project, processed: List[ProcessedImage]) -> str:
    """One grid per section in declared section order; empty sections are left out."""
    by_section: Dict[str, List[ProcessedImage]] = {s: [] for s in ordered_sections(project.grids)}
    for p in processed:
        by_section.setdefault(p.section, []).append(p)

    sections = [
        {"name": name, "cols": section_cols(name), "tiles": tiles}
        for name, tiles in by_section.items()
        if tiles
    ]
    template = _jinja.get_template("gallery.html")
    return template.render(title=project.project_name or "Dataset", sections=sections)


def export_static_gallery(
    project: Project,
    image_bytes_provider: ImageBytesProvider = None,
    archive_writer: ArchiveWriter = None,
    *,
    image_service: ImageService = ImageService(),
    max_dim: int = GALLERY_MAX_DIM,
    quality: int = GALLERY_JPEG_QUALITY,
) -> bytes:
    """
    For every image in *project* (declared section order, then slot order):
        • fetch its bytes through *image_bytes_provider*
        • shrink to fit max_dim x max_dim, re-encode as JPEG at *quality*
        • give it a collision-safe name under images/
    A failing image is logged and skipped; the export carries on without it.
    Errors raised by *archive_writer* propagate to the caller.

    Returns:
        bytes: whatever *archive_writer* produced (a zip by default).
    """
    image_bytes_provider = image_bytes_provider or ImageSourceRepository()
    archive_writer = archive_writer or ZipArchiveWriter()

    processed: List[ProcessedImage] = []
    used_names: Dict[str, int] = {}
    global_index = 0
    skipped = 0

    # used_names and processed are shared across iterations: keep this loop sequential.
    for section, slot_index, slot in ProjectService.iter_slots_declared_order(project):
        try:
            raw = image_bytes_provider(slot.path)
            img = image_service.decode(raw, source=slot.path)
            img = image_service.fit_within(img, max_dim)
            data = image_service.to_jpeg_bytes(img, quality)
        except Exception as e:
            skipped += 1
            logger.warning(f"Static export: skip image {slot.path} ({section} #{slot_index + 1}): {e}")
            continue

        filename = allocate_name(image_service.gallery_file_name(slot.path), used_names)
        processed.append(ProcessedImage(
            filename=filename,
            section=section,
            caption=slot.caption or "",
            index=global_index,
            data=data,
        ))
        global_index += 1

    html = render_gallery_html(project, processed)

    entries: List[Tuple[str, bytes]] = [("index.html", html.encode("utf-8"))]
    entries.extend((f"images/{p.filename}", p.data) for p in processed)
    entries.append(("project.json", json.dumps(project.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")))

    print(f"🖼️  Static gallery: {len(processed)} images exported, {skipped} skipped")
    return archive_writer(entries)
