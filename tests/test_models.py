from models.image_slot import ImageSlot
from models.metadata import Action, Angle, ImageMetadata, ShotType
from models.project import Descriptions, Project, initial_grids


def test_unknown_values_parse_as_unset():
    assert Angle.parse("sideways") is Angle.UNSET
    assert Angle.parse(None) is Angle.UNSET
    assert Action.parse("none") is Action.NONE


def test_categories_exclude_unset():
    assert [s.value for s in ShotType.categories()] == ["extreme-close", "close", "medium", "wide"]


def test_metadata_json_uses_camel_case():
    meta = ImageMetadata.from_dict({"shotType": "wide", "angle": "back", "mood": "weird"})

    assert meta.shot_type is ShotType.WIDE
    assert meta.is_detected
    assert not meta.is_complete
    data = meta.to_dict()
    assert data["shotType"] == "wide"
    assert data["mood"] == ""
    assert data["likeness"] == {"score": 1.0, "ref": "none"}


def test_slot_without_metadata_is_not_detected():
    slot = ImageSlot.from_dict({"path": "a.jpg"})
    assert slot.caption == ""
    assert not slot.is_detected


def test_project_json_shape():
    project = Project(project_name="p", descriptions=Descriptions(lora_trigger="ohwx"))
    project.grids["Close Up Head Rotations"][0] = ImageSlot(path="a.jpg", caption="c")
    data = project.to_dict()

    assert set(data) == {"version", "projectName", "grids", "descriptions", "promptTemplate"}
    assert data["descriptions"]["loraTrigger"] == "ohwx"
    assert data["grids"]["Close Up Head Rotations"][:2] == [
        {"path": "a.jpg", "caption": "c", "metadata": ImageMetadata().to_dict()},
        None,
    ]
    restored = Project.from_dict(data)
    assert restored.grids["Close Up Head Rotations"][0].caption == "c"
    assert restored.descriptions.lora_trigger == "ohwx"


def test_initial_grids_are_independent_lists():
    grids = initial_grids()
    grids["Close Up Extremes"][0] = ImageSlot(path="x")
    assert initial_grids()["Close Up Extremes"][0] is None


def test_likeness_score_falls_back_on_bad_values():
    assert ImageMetadata.from_dict({"likeness": {"score": None}}).likeness.score == 1.0
    assert ImageMetadata.from_dict({"likeness": {"score": "high"}}).likeness.score == 1.0
    assert ImageMetadata.from_dict({"likeness": {"score": "0.4"}}).likeness.score == 0.4
