from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict

from models.metadata import ImageMetadata


@dataclass
class ImageSlot:
    """
    One filled grid position: an image reference plus its caption and metadata.
    `path` is a file:// URL, a local path (absolute or project-relative) or an http(s) URL.
    """
    path: str
    caption: str = ""
    metadata: ImageMetadata = field(default_factory=ImageMetadata)

    @property
    def is_detected(self) -> bool:
        return self.metadata.is_detected

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "caption": self.caption, "metadata": self.metadata.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageSlot":
        return cls(
            path=data.get("path") or "",
            caption=data.get("caption") or "",
            metadata=ImageMetadata.from_dict(data.get("metadata")),
        )


# The scorers only read shot type / orthogonal fields and the caption.
AnnotatedImage = ImageSlot
