from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.image_slot import ImageSlot


@dataclass(frozen=True)
class SectionConfig:
    cols: int
    slots: int


# Declared order is the display/export order of sections.
GRID_SECTION_CONFIGS: Dict[str, SectionConfig] = {
    "Close Up Head Rotations": SectionConfig(cols=5, slots=15),
    "Close Up Head Emotions": SectionConfig(cols=5, slots=15),
    "Close Up Lighting Variations": SectionConfig(cols=5, slots=10),
    "Close Up Extremes": SectionConfig(cols=5, slots=10),
    "Medium Head Shots": SectionConfig(cols=5, slots=30),
    "Wide Character Shots": SectionConfig(cols=5, slots=35),
    "Additional Images": SectionConfig(cols=5, slots=40),
}
DEFAULT_SECTION_COLS = 5

Grid = List[Optional[ImageSlot]]


def _slot_from_json(raw: Any) -> Optional[ImageSlot]:
    if not raw:
        return None
    # Early project files stored bare image names instead of slot objects.
    if isinstance(raw, str):
        return ImageSlot(path=raw)
    return ImageSlot.from_dict(raw)


def initial_grids() -> Dict[str, Grid]:
    return {name: [None] * cfg.slots for name, cfg in GRID_SECTION_CONFIGS.items()}


def ordered_sections(grids: Dict[str, Grid]) -> List[str]:
    """Sections present in *grids*: declared ones first, then any extras in stored order."""
    declared = [name for name in GRID_SECTION_CONFIGS if name in grids]
    extras = [name for name in grids if name not in GRID_SECTION_CONFIGS]
    return declared + extras


def section_cols(section: str) -> int:
    cfg = GRID_SECTION_CONFIGS.get(section)
    return cfg.cols if cfg else DEFAULT_SECTION_COLS


@dataclass
class Descriptions:
    notes: str = ""
    face_image_description: str = ""
    clothes_image_description: str = ""
    full_body_clothes_description: str = ""
    environment_description: str = ""
    lora_trigger: str = ""
    subject_addition: str = ""

    _KEYS = {
        "notes": "notes",
        "face_image_description": "faceImageDescription",
        "clothes_image_description": "clothesImageDescription",
        "full_body_clothes_description": "fullBodyClothesDescription",
        "environment_description": "environmentDescription",
        "lora_trigger": "loraTrigger",
        "subject_addition": "subjectAddition",
    }

    def to_dict(self) -> Dict[str, str]:
        return {json_key: getattr(self, attr) for attr, json_key in self._KEYS.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "Descriptions":
        data = data or {}
        return cls(**{attr: str(data.get(json_key) or "") for attr, json_key in cls._KEYS.items()})


@dataclass
class Project:
    """
    Canonical project state: named grid sections of optional image slots.
    """
    project_name: str
    grids: Dict[str, Grid] = field(default_factory=initial_grids)
    descriptions: Descriptions = field(default_factory=Descriptions)
    prompt_template: str = ""
    version: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "projectName": self.project_name,
            "grids": {
                section: [slot.to_dict() if slot else None for slot in slots]
                for section, slots in self.grids.items()
            },
            "descriptions": self.descriptions.to_dict(),
            "promptTemplate": self.prompt_template,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        grids: Dict[str, Grid] = {}
        for section, slots in (data.get("grids") or {}).items():
            grids[section] = [_slot_from_json(s) for s in slots or []]
        return cls(
            project_name=data.get("projectName") or "",
            grids=grids,
            descriptions=Descriptions.from_dict(data.get("descriptions")),
            prompt_template=data.get("promptTemplate") or "",
            version=int(data.get("version") or 1),
        )
