import csv
import io

from models.project import Project
from services.image_service import ImageService
from services.project_service import ProjectService

CSV_HEADER = ["index", "prompt", "image_name"]


def export_captions_csv(project: Project) -> str:
    """
    index,prompt,image_name rows for every captioned slot, sections in
    declared order, index starting at 1.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    idx = 1
    for _, _, slot in ProjectService.iter_slots_declared_order(project):
        caption = (slot.caption or "").strip()
        if not caption:
            continue
        writer.writerow([idx, caption, ImageService.base_name(slot.path)])
        idx += 1

    return buffer.getvalue().rstrip("\n")
