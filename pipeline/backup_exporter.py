import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Tuple

from models.image_slot import ImageSlot
from models.project import Grid, Project
from pipeline.static_gallery_exporter import allocate_name
from repositories.archive_repository import ZipArchiveWriter
from repositories.image_source_repository import ImageSourceRepository, is_remote
from repositories.project_repository import PROJECT_FILE, ProjectRepository

logger = logging.getLogger(__name__)

BACKUP_DIR = "backups"


def export_backup_zip(
    project: Project,
    project_repository: ProjectRepository = None,
    *,
    archive_writer: ZipArchiveWriter = None,
    now: datetime = None,
) -> Path:
    """
    Snapshot of a project: project.json plus every local image.
    Images inside the project folder keep their relative path, images elsewhere
    go under images/ with collision-safe names. Slot paths in the bundled
    project.json are the archive names, so the zip restores as a project folder.
    Remote images are only referenced.
    Written to <project dir>/backups/<project>_backup_<timestamp>.zip.
    """
    project_repository = project_repository or ProjectRepository()
    archive_writer = archive_writer or ZipArchiveWriter()
    image_source = ImageSourceRepository()
    project_dir = project_repository.project_dir(project.project_name).absolute()

    image_entries: List[Tuple[str, bytes]] = []
    archived: Dict[Path, str] = {}
    used: Dict[str, int] = {}
    grids: Dict[str, Grid] = {}

    for section, slots in project.grids.items():
        converted: Grid = []
        for slot in slots:
            if not slot or not slot.path or is_remote(slot.path):
                converted.append(slot)
                continue

            local = image_source.resolve_local_path(slot.path)
            if not local.is_absolute():
                local = project_dir / local
            if local not in archived:
                rel = os.path.relpath(str(local), str(project_dir)).replace("\\", "/")
                if rel.startswith("../"):
                    rel = f"images/{local.name}"
                rel = allocate_name(rel, used)
                archived[local] = rel
                try:
                    image_entries.append((rel, image_source(str(local))))
                except Exception as e:
                    logger.warning(f"Backup: skip image {slot.path} ({section}): {e}")

            converted.append(ImageSlot(path=archived[local], caption=slot.caption, metadata=slot.metadata))
        grids[section] = converted

    portable = Project(
        project_name=project.project_name,
        grids=grids,
        descriptions=project.descriptions,
        prompt_template=project.prompt_template,
        version=project.version,
    )
    entries: List[Tuple[str, bytes]] = [
        (PROJECT_FILE, json.dumps(portable.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")),
    ]
    entries.extend(image_entries)

    data = archive_writer(entries)
    name = archive_writer.archive_name(project.project_name, "backup", now)
    path = archive_writer.save(data, project_dir / BACKUP_DIR / name)
    logger.info(f"Backup written to {path}")
    return path
