import json
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, List, Union

from dotenv import load_dotenv

from models.image_slot import ImageSlot
from models.project import GRID_SECTION_CONFIGS, Grid, Project
from repositories.image_source_repository import file_url_to_path, is_remote

# Load environment variables
load_dotenv()

LORA_DATA_ROOT = os.getenv("LORA_DATA_ROOT", str(Path.home() / "LoraData"))
PROJECT_FILE = "project.json"

logger = logging.getLogger(__name__)

GridMap = Dict[str, Grid]


def _with_path(slot: ImageSlot, path: str) -> ImageSlot:
    return ImageSlot(path=path, caption=slot.caption, metadata=slot.metadata)


def to_relative_grids(grids: GridMap, project_dir: Union[str, Path]) -> GridMap:
    """
    Rewrite file:// slot paths as POSIX paths relative to *project_dir*.
    Anything else (relative paths, http URLs, empty slots) is left as is.
    """
    project_dir = os.path.abspath(project_dir)
    result: GridMap = {}
    for section, slots in grids.items():
        converted: Grid = []
        for slot in slots:
            if slot and slot.path and slot.path.startswith("file://"):
                file_path = str(file_url_to_path(slot.path))
                relative = os.path.relpath(file_path, project_dir).replace("\\", "/")
                converted.append(_with_path(slot, relative))
            else:
                converted.append(slot)
        result[section] = converted
    return result


def to_absolute_grids(grids: GridMap, project_dir: Union[str, Path]) -> GridMap:
    """
    Join relative slot paths onto *project_dir* (plain paths, no file:// prefix).
    """
    result: GridMap = {}
    for section, slots in grids.items():
        converted: Grid = []
        for slot in slots:
            if (
                slot
                and slot.path
                and not slot.path.startswith("file://")
                and not is_remote(slot.path)
                and not os.path.isabs(slot.path)
            ):
                converted.append(_with_path(slot, os.path.join(str(project_dir), slot.path)))
            else:
                converted.append(slot)
        result[section] = converted
    return result


def to_file_url_grids(grids: GridMap) -> GridMap:
    """Absolute local paths -> file:// URLs, the form slots are edited in."""
    result: GridMap = {}
    for section, slots in grids.items():
        result[section] = [
            _with_path(slot, Path(slot.path).as_uri())
            if slot and slot.path and os.path.isabs(slot.path)
            else slot
            for slot in slots
        ]
    return result


def pad_grids(grids: GridMap) -> GridMap:
    """
    Every declared section is present and at least as long as its configured slot count.
    Older projects saved with fewer slots grow, extra sections are kept after the declared ones.
    """
    padded: GridMap = {}
    for section, cfg in GRID_SECTION_CONFIGS.items():
        slots = list(grids.get(section, []))
        if len(slots) < cfg.slots:
            slots.extend([None] * (cfg.slots - len(slots)))
        padded[section] = slots
    for section, slots in grids.items():
        if section not in padded:
            padded[section] = list(slots)
    return padded


class ProjectRepository:
    """
    Handles project folders under the data root and their project.json files.
    """

    def __init__(self, root: Union[str, Path] = LORA_DATA_ROOT):
        self.root = Path(root).expanduser()

    def project_dir(self, project_name: str) -> Path:
        if not project_name or Path(project_name).name != project_name:
            raise ValueError(f"Invalid project name: {project_name!r}")
        return self.root / project_name

    def project_file(self, project_name: str) -> Path:
        return self.project_dir(project_name) / PROJECT_FILE

    def list_projects(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir())

    def exists(self, project_name: str) -> bool:
        return self.project_file(project_name).is_file()

    def load(self, project_name: str) -> Project:
        project_file = self.project_file(project_name)
        if not project_file.is_file():
            raise FileNotFoundError(f"Project not found: {project_file}")

        data = json.loads(project_file.read_text(encoding="utf-8"))
        project = Project.from_dict(data)
        # Folder name wins over the projectName stored in the file.
        project.project_name = project_name

        grids = to_absolute_grids(project.grids, project_file.parent.absolute())
        project.grids = pad_grids(to_file_url_grids(grids))
        logger.info(f"Loaded project '{project_name}' from {project_file}")
        return project

    def to_portable_dict(self, project: Project) -> dict:
        """Project JSON with slot paths relative to the project folder."""
        project_dir = self.project_dir(project.project_name)
        portable = Project(
            project_name=project.project_name,
            grids=to_relative_grids(project.grids, project_dir),
            descriptions=project.descriptions,
            prompt_template=project.prompt_template,
            version=project.version,
        )
        return portable.to_dict()

    def save(self, project: Project) -> Path:
        project_dir = self.project_dir(project.project_name)
        project_dir.mkdir(parents=True, exist_ok=True)

        save_path = project_dir / PROJECT_FILE
        payload = json.dumps(self.to_portable_dict(project), indent=2, ensure_ascii=False)
        save_path.write_text(payload, encoding="utf-8")
        logger.info(f"Project saved to {save_path}")
        return save_path

    def copy_image(self, project_name: str, source: Union[str, Path], target_stem: str) -> Path:
        """Copy *source* into the project folder as `<target_stem><original ext>`."""
        source = Path(source)
        if not source.is_file():
            raise FileNotFoundError(f"Image not found: {source}")
        project_dir = self.project_dir(project_name)
        project_dir.mkdir(parents=True, exist_ok=True)
        dest = project_dir / f"{target_stem}{source.suffix}"
        shutil.copyfile(source, dest)
        return dest
