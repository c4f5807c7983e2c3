from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class DatasetSummary:
    image_count: int
    captioned: int
    with_full_metadata: int

    @property
    def missing_metadata(self) -> int:
        return self.image_count - self.with_full_metadata

    @property
    def captioned_pct(self) -> int:
        return round(self.captioned / self.image_count * 100) if self.image_count else 0

    @property
    def full_metadata_pct(self) -> int:
        return round(self.with_full_metadata / self.image_count * 100) if self.image_count else 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.update(
            missing_metadata=self.missing_metadata,
            captioned_pct=self.captioned_pct,
            full_metadata_pct=self.full_metadata_pct,
        )
        return data
