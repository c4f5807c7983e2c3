import zipfile
from io import BytesIO

import pytest

import api_server


@pytest.fixture
def client(monkeypatch, project_service, tmp_path):
    monkeypatch.setattr(api_server, "project_service", project_service)
    export = api_server.export_to_ai_toolkit
    monkeypatch.setattr(
        api_server, "export_to_ai_toolkit",
        lambda project: export(project, datasets_path=tmp_path / "datasets"),
    )
    api_server.app.config["TESTING"] = True
    with api_server.app.test_client() as client:
        yield client


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"


def test_list_and_get_project(client, project_on_disk):
    assert client.get("/api/projects").get_json()["projects"] == ["alice"]

    data = client.get("/api/projects/alice").get_json()
    assert data["success"] is True
    assert data["project"]["projectName"] == "alice"


def test_unknown_project_is_404(client):
    response = client.get("/api/projects/ghost/balance")
    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_reports(client, project_on_disk):
    balance = client.get("/api/projects/alice/balance").get_json()["report"]
    assert balance["total_detected"] == 2

    coverage = client.get("/api/projects/alice/coverage").get_json()["report"]
    assert coverage["recommendations"][0].startswith("Angles: missing")

    summary = client.get("/api/projects/alice/dataset-check").get_json()["summary"]
    assert summary["image_count"] == 3


def test_put_project(client, project_service):
    payload = {"projectName": "ignored", "grids": {"Close Up Extremes": [{"path": "https://x/y.jpg", "caption": "eye"}]}}
    response = client.put("/api/projects/frank", json=payload)

    assert response.status_code == 200
    project = project_service.load("frank")
    assert project.project_name == "frank"
    assert project.grids["Close Up Extremes"][0].caption == "eye"


def test_put_requires_json_object(client):
    response = client.put("/api/projects/frank", data="nope", content_type="text/plain")
    assert response.status_code == 400


def test_export_static_html(client, project_on_disk):
    response = client.post("/api/projects/alice/export/static-html")

    assert response.status_code == 200
    assert response.mimetype == "application/zip"
    assert "attachment" in response.headers["Content-Disposition"]
    names = zipfile.ZipFile(BytesIO(response.data)).namelist()
    assert "index.html" in names
    assert "images/c.jpg" in names


def test_export_captions_csv(client, project_on_disk):
    response = client.post("/api/projects/alice/export/captions-csv")
    assert response.mimetype == "text/csv"
    assert response.data.decode().splitlines()[0] == "index,prompt,image_name"


def test_export_ai_toolkit(client, project_on_disk, tmp_path):
    data = client.post("/api/projects/alice/export/ai-toolkit").get_json()
    assert data["success"] is True
    assert data["path"] == str(tmp_path / "datasets" / "alice")


def test_export_unknown_kind(client, project_on_disk):
    response = client.post("/api/projects/alice/export/pdf")
    assert response.status_code == 400
    assert "static-html" in response.get_json()["message"]
