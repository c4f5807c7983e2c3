from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class Category(str, Enum):
    """
    Closed set of values for one metadata dimension.
    UNSET ("") stands for a field nobody has filled in yet.
    """

    @classmethod
    def parse(cls, raw: Any):
        # Hand-edited project files may carry typos; treat them as unset.
        try:
            return cls(raw or "")
        except ValueError:
            return cls("")

    @classmethod
    def categories(cls) -> list:
        """All real values in declaration order (UNSET excluded)."""
        return [member for member in cls if member.value]


class ShotType(Category):
    UNSET = ""
    EXTREME_CLOSE = "extreme-close"
    CLOSE = "close"
    MEDIUM = "medium"
    WIDE = "wide"


class Angle(Category):
    UNSET = ""
    FRONTAL = "frontal"
    THREE_QUARTER = "three-quarter"
    PROFILE = "profile"
    BACK = "back"
    LOW_ANGLE = "low-angle"
    HIGH_ANGLE = "high-angle"


class Lighting(Category):
    UNSET = ""
    DAYLIGHT = "daylight"
    INDOOR = "indoor"
    NIGHT = "night"
    SUNSET = "sunset"
    STUDIO = "studio"


class Environment(Category):
    UNSET = ""
    NEUTRAL = "neutral"
    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    NATURE = "nature"
    CITY = "city"
    SKY = "sky"


class Mood(Category):
    UNSET = ""
    NEUTRAL = "neutral"
    SMILING = "smiling"
    SERIOUS = "serious"
    SURPRISED = "surprised"
    DREAMY = "dreamy"
    STERN = "stern"
    RELAXED = "relaxed"
    CONTEMPLATIVE = "contemplative"


class Action(Category):
    UNSET = ""
    STAND = "stand"
    SIT = "sit"
    WALK = "walk"
    GESTURE = "gesture"
    HOLD_OBJECT = "hold-object"
    INTERACT = "interact"
    NONE = "none"


def _parse_score(raw: Any) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 1.0


@dataclass
class Likeness:
    score: float = 1.0   # 0..1, filled later by a face matcher
    ref: str = "none"    # reference id


@dataclass
class ImageMetadata:
    """
    Categorical annotations for one dataset image.
    JSON keys follow the camelCase layout of saved project files.
    """
    shot_type: ShotType = ShotType.UNSET
    angle: Angle = Angle.UNSET
    lighting: Lighting = Lighting.UNSET
    environment: Environment = Environment.UNSET
    mood: Mood = Mood.UNSET
    action: Action = Action.UNSET
    likeness: Likeness = field(default_factory=Likeness)

    @property
    def is_detected(self) -> bool:
        return self.shot_type is not ShotType.UNSET

    @property
    def is_complete(self) -> bool:
        return all(
            value.value
            for value in (self.shot_type, self.angle, self.lighting,
                          self.environment, self.mood, self.action)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shotType": self.shot_type.value,
            "angle": self.angle.value,
            "lighting": self.lighting.value,
            "environment": self.environment.value,
            "mood": self.mood.value,
            "action": self.action.value,
            "likeness": {"score": self.likeness.score, "ref": self.likeness.ref},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "ImageMetadata":
        if not data:
            return cls()
        likeness = data.get("likeness") or {}
        return cls(
            shot_type=ShotType.parse(data.get("shotType")),
            angle=Angle.parse(data.get("angle")),
            lighting=Lighting.parse(data.get("lighting")),
            environment=Environment.parse(data.get("environment")),
            mood=Mood.parse(data.get("mood")),
            action=Action.parse(data.get("action")),
            likeness=Likeness(
                score=_parse_score(likeness.get("score")),
                ref=str(likeness.get("ref") or "none"),
            ),
        )
