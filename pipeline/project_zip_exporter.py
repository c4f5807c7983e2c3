import json
import logging
from datetime import datetime
from typing import Dict, List, Tuple

from models.project import Project
from pipeline.static_gallery_exporter import ArchiveWriter, ImageBytesProvider, allocate_pair
from repositories.archive_repository import ZipArchiveWriter
from repositories.image_source_repository import ImageSourceRepository
from services.image_service import ImageService
from services.project_service import ProjectService

logger = logging.getLogger(__name__)


def export_project_zip(
    project: Project,
    image_bytes_provider: ImageBytesProvider = None,
    archive_writer: ArchiveWriter = None,
    *,
    now: datetime = None,
) -> bytes:
    """
    Zip with project.json, one folder per section holding the original image
    bytes plus a caption .txt next to each captioned image, and exported_at.txt.
    """
    image_bytes_provider = image_bytes_provider or ImageSourceRepository()
    archive_writer = archive_writer or ZipArchiveWriter()
    now = now or datetime.now()

    project_json = {
        "projectName": project.project_name,
        "grids": project.to_dict()["grids"],
        "descriptions": project.descriptions.to_dict(),
    }
    entries: List[Tuple[str, bytes]] = [
        ("project.json", json.dumps(project_json, indent=2, ensure_ascii=False).encode("utf-8")),
    ]

    used_per_section: Dict[str, Dict[str, int]] = {}
    for section, _, slot in ProjectService.iter_slots(project):
        try:
            data = image_bytes_provider(slot.path)
        except Exception as e:
            logger.warning(f"Zip export: skip image {slot.path}: {e}")
            continue

        used = used_per_section.setdefault(section, {})
        filename, caption_name = allocate_pair(ImageService.base_name(slot.path) or "image.jpg", used)
        entries.append((f"{section}/{filename}", data))
        if slot.caption and slot.caption.strip():
            entries.append((f"{section}/{caption_name}", slot.caption.encode("utf-8")))

    entries.append(("exported_at.txt", now.isoformat().encode("utf-8")))
    return archive_writer(entries)
