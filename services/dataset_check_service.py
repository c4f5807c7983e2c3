from models.dataset_summary import DatasetSummary
from models.project import Project


class DatasetCheckService:
    """
    Quick counts for the dataset check view: how many images are placed,
    captioned, and carry all six metadata fields.
    """

    def summarize(self, project: Project) -> DatasetSummary:
        image_count = captioned = with_full_metadata = 0
        for slots in project.grids.values():
            for slot in slots:
                if not slot:
                    continue
                image_count += 1
                if slot.caption and slot.caption.strip():
                    captioned += 1
                if slot.metadata.is_complete:
                    with_full_metadata += 1

        return DatasetSummary(
            image_count=image_count,
            captioned=captioned,
            with_full_metadata=with_full_metadata,
        )
