from io import BytesIO

import pytest
from PIL import Image as PILImage

from models.image_slot import ImageSlot
from models.metadata import Action, Angle, Environment, ImageMetadata, Lighting, Mood, ShotType
from models.project import Project
from repositories.project_repository import ProjectRepository
from services.project_service import ProjectService


def image_bytes(width=40, height=30, color=(200, 80, 40), fmt="JPEG"):
    buffer = BytesIO()
    PILImage.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def slot(path="img.jpg", caption="", shot="", angle="", lighting="", environment="", mood="", action=""):
    return ImageSlot(
        path=path,
        caption=caption,
        metadata=ImageMetadata(
            shot_type=ShotType(shot),
            angle=Angle(angle),
            lighting=Lighting(lighting),
            environment=Environment(environment),
            mood=Mood(mood),
            action=Action(action),
        ),
    )


@pytest.fixture
def make_slot():
    return slot


@pytest.fixture
def make_image_bytes():
    return image_bytes


@pytest.fixture
def repository(tmp_path):
    return ProjectRepository(tmp_path / "LoraData")


@pytest.fixture
def project_service(repository):
    return ProjectService(repository)


@pytest.fixture
def project_on_disk(repository):
    """Saved project 'alice' with two captioned JPEGs and one uncaptioned PNG."""
    project_dir = repository.project_dir("alice")
    project_dir.mkdir(parents=True)
    (project_dir / "a.jpg").write_bytes(image_bytes(60, 40))
    (project_dir / "b.jpg").write_bytes(image_bytes(30, 60, (10, 10, 200)))
    (project_dir / "c.png").write_bytes(image_bytes(20, 20, fmt="PNG"))

    project = Project(project_name="alice")
    project.grids["Close Up Head Rotations"][0] = slot(
        (project_dir / "a.jpg").as_uri(), caption="  alice, frontal close up ", shot="close",
        angle="frontal", lighting="daylight", environment="neutral", mood="smiling", action="stand",
    )
    project.grids["Medium Head Shots"][2] = slot((project_dir / "b.jpg").as_uri(), caption="alice sitting", shot="medium")
    project.grids["Additional Images"][0] = slot((project_dir / "c.png").as_uri())
    repository.save(project)
    return repository.load("alice")
