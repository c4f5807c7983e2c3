import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from models.image_slot import ImageSlot
from models.metadata import ImageMetadata
from models.project import Project, initial_grids, ordered_sections
from repositories.project_repository import ProjectRepository
from services.image_service import ImageService

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Business logic on top of ProjectRepository: slot editing and ordered traversal.
    """

    def __init__(self, repository: ProjectRepository = None):
        self.repository = repository or ProjectRepository()

    def list_projects(self) -> List[str]:
        return self.repository.list_projects()

    def create(self, project_name: str) -> Project:
        project = Project(project_name=project_name, grids=initial_grids())
        self.repository.save(project)
        return project

    def load(self, project_name: str) -> Project:
        return self.repository.load(project_name)

    def load_or_create(self, project_name: str) -> Project:
        if self.repository.exists(project_name):
            return self.load(project_name)
        return self.create(project_name)

    def save(self, project: Project) -> Path:
        return self.repository.save(project)

    def project_dir(self, project: Project) -> Path:
        return self.repository.project_dir(project.project_name)

    @staticmethod
    def _check_slot(project: Project, section: str, index: int) -> None:
        if section not in project.grids:
            raise ValueError(f"Unknown section: {section}")
        if not 0 <= index < len(project.grids[section]):
            raise ValueError(f"Slot {index} out of range for section '{section}'")

    def get_slot(self, project: Project, section: str, index: int) -> Optional[ImageSlot]:
        self._check_slot(project, section, index)
        return project.grids[section][index]

    def place_image(self, project: Project, section: str, index: int, source: Union[str, Path]) -> ImageSlot:
        """
        Copy *source* into the project folder as "<section> <n>" and put it in the slot.
        """
        self._check_slot(project, section, index)
        dest = self.repository.copy_image(project.project_name, source, f"{section} {index + 1}")
        slot = ImageSlot(path=dest.absolute().as_uri())
        project.grids[section][index] = slot
        logger.info(f"Placed {dest.name} in '{section}' slot {index + 1}")
        self.save(project)
        return slot

    def set_image(self, project: Project, section: str, index: int, path: str) -> ImageSlot:
        """Point a slot at an existing reference without copying."""
        self._check_slot(project, section, index)
        slot = ImageSlot(path=path)
        project.grids[section][index] = slot
        return slot

    def set_caption(self, project: Project, section: str, index: int, caption: str) -> None:
        slot = self.get_slot(project, section, index)
        if slot is None:
            raise ValueError(f"Slot {index} in '{section}' is empty")
        slot.caption = caption

    def set_metadata(self, project: Project, section: str, index: int, metadata: ImageMetadata) -> None:
        slot = self.get_slot(project, section, index)
        if slot is None:
            raise ValueError(f"Slot {index} in '{section}' is empty")
        slot.metadata = metadata

    def remove_image(self, project: Project, base_name: str) -> bool:
        """Empty the first slot whose file name matches *base_name*."""
        for slots in project.grids.values():
            for i, slot in enumerate(slots):
                if slot and ImageService.base_name(slot.path) == base_name:
                    slots[i] = None
                    return True
        return False

    @staticmethod
    def iter_slots(project: Project) -> Iterator[Tuple[str, int, ImageSlot]]:
        """
        (section, index, slot) for every filled slot, in the project's stored order.
        """
        for section, slots in project.grids.items():
            for i, slot in enumerate(slots):
                if slot and slot.path:
                    yield section, i, slot

    @staticmethod
    def iter_slots_declared_order(project: Project) -> Iterator[Tuple[str, int, ImageSlot]]:
        for section in ordered_sections(project.grids):
            for i, slot in enumerate(project.grids[section]):
                if slot and slot.path:
                    yield section, i, slot

    def iter_images(self, project: Project) -> Iterator[ImageSlot]:
        """Filled slots only, section then slot order."""
        for _, _, slot in self.iter_slots(project):
            yield slot
