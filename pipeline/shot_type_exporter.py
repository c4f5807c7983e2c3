import json
import logging
from datetime import datetime
from typing import Dict, List, Tuple

from models.metadata import ShotType
from models.project import Project
from pipeline.static_gallery_exporter import ArchiveWriter, ImageBytesProvider, allocate_pair
from repositories.archive_repository import ZipArchiveWriter
from repositories.image_source_repository import ImageSourceRepository
from services.image_service import ImageService
from services.project_service import ProjectService

logger = logging.getLogger(__name__)

SHOT_FOLDERS = [shot.value for shot in ShotType.categories()]


def export_shot_type_zip(
    project: Project,
    image_bytes_provider: ImageBytesProvider = None,
    archive_writer: ArchiveWriter = None,
    *,
    now: datetime = None,
) -> bytes:
    """
    Zip with one folder per shot type (extreme-close, close, medium, wide).
    Images without a shot type are left out. Captions are trimmed into <name>.txt.
    """
    image_bytes_provider = image_bytes_provider or ImageSourceRepository()
    archive_writer = archive_writer or ZipArchiveWriter()
    now = now or datetime.now()

    # Directory entries so every folder exists even when empty.
    entries: List[Tuple[str, bytes]] = [(f"{folder}/", b"") for folder in SHOT_FOLDERS]
    used_per_folder: Dict[str, Dict[str, int]] = {}

    for _, _, slot in ProjectService.iter_slots(project):
        shot = slot.metadata.shot_type
        if shot is ShotType.UNSET:
            continue
        try:
            data = image_bytes_provider(slot.path)
        except Exception as e:
            logger.warning(f"Shot-type export: skip image {slot.path}: {e}")
            continue

        used = used_per_folder.setdefault(shot.value, {})
        filename, caption_name = allocate_pair(ImageService.base_name(slot.path) or "image.jpg", used)
        entries.append((f"{shot.value}/{filename}", data))
        caption = (slot.caption or "").strip()
        if caption:
            entries.append((f"{shot.value}/{caption_name}", caption.encode("utf-8")))

    manifest = {"project": project.project_name, "generatedAt": now.isoformat()}
    entries.append(("manifest.json", json.dumps(manifest, indent=2).encode("utf-8")))
    return archive_writer(entries)
