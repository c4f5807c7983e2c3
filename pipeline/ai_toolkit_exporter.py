import logging
import os
from pathlib import Path
from typing import Dict, Union

from dotenv import load_dotenv

from models.project import Project
from pipeline.static_gallery_exporter import allocate_pair
from repositories.image_source_repository import ImageSourceRepository
from services.image_service import ImageService
from services.project_service import ProjectService

# Load environment variables
load_dotenv()

AI_TOOLKIT_DATASETS_PATH = os.getenv("AI_TOOLKIT_DATASETS_PATH", str(Path.home() / "ai-toolkit" / "datasets"))
RESIZE_EXPORT_IMAGES = os.getenv("RESIZE_EXPORT_IMAGES", "true").lower() in ("1", "true", "yes")
AI_TOOLKIT_MAX_DIM = int(os.getenv("AI_TOOLKIT_MAX_DIM", "1024"))

logger = logging.getLogger(__name__)


def export_to_ai_toolkit(
    project: Project,
    *,
    datasets_path: Union[str, Path] = AI_TOOLKIT_DATASETS_PATH,
    resize: bool = RESIZE_EXPORT_IMAGES,
    max_dim: int = AI_TOOLKIT_MAX_DIM,
    image_source: ImageSourceRepository = None,
    image_service: ImageService = ImageService(),
) -> Path:
    """
    Copies a project's images into an ai-toolkit dataset folder.

    Args:
        project: project to export
        datasets_path: ai-toolkit datasets root; the folder <datasets_path>/<project name> is created
        resize: downscale images to fit max_dim x max_dim before writing
        max_dim: bound used when resizing
        image_source: resolves slot references to bytes

    Returns:
        Path: the dataset folder
    """
    image_source = image_source or ImageSourceRepository()
    target_dir = Path(datasets_path).expanduser() / (project.project_name or "dataset")
    target_dir.mkdir(parents=True, exist_ok=True)

    used: Dict[str, int] = {}
    exported = 0
    for section, _, slot in ProjectService.iter_slots_declared_order(project):
        name, caption_name = allocate_pair(image_service.sanitize_base_name(slot.path), used)

        try:
            data = image_source(slot.path)
            if resize:
                img = image_service.fit_within(image_service.decode(data, source=slot.path), max_dim)
                data = image_service.to_format_bytes(img, name)
        except Exception as e:
            logger.warning(f"ai-toolkit export: skip image {slot.path} ({section}): {e}")
            continue

        (target_dir / name).write_bytes(data)
        caption = (slot.caption or "").strip()
        if caption:
            (target_dir / caption_name).write_text(caption, encoding="utf-8")
        exported += 1

    print(f"📁 ai-toolkit dataset: {exported} images written to {target_dir}")
    return target_dir
