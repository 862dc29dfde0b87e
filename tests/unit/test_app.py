from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy import update

from src.weaveit.db.db_models import AccountModel
from src.weaveit.main import create_app
from tests.mocks.providers import (
    SPEECH_BYTES,
    VIDEO_BYTES,
    MockConfig,
    MockScenario,
    mock_collaborators,
)


def test_video_generation_round_trip(app_config) -> None:
    client = TestClient(create_app(app_config, mock_collaborators()))

    generated = client.post(
        "/api/generate",
        json={"walletAddress": "wallet-a", "script": "print('hi')", "title": "Hi"},
    )
    assert generated.status_code == 200
    job_id = generated.json()["job_id"]
    artifact_id = generated.json()["artifact_id"]

    status = client.get(f"/api/videos/status/{job_id}").json()
    assert status["status"] == "completed"
    assert status["ready"] is True

    by_job = client.get(f"/api/videos/job/{job_id}")
    assert by_job.status_code == 200
    assert by_job.content == VIDEO_BYTES
    assert by_job.headers["content-type"] == "video/mp4"
    assert by_job.headers["content-disposition"] == f'inline; filename="{job_id}.mp4"'

    by_id = client.get(f"/api/videos/{artifact_id}")
    assert by_id.content == VIDEO_BYTES

    listing = client.get("/api/wallet/wallet-a/videos").json()
    assert listing["count"] == 1
    entry = listing["videos"][0]
    assert entry["video_id"] == artifact_id
    assert entry["title"] == "Hi"
    assert entry["content_type"] == "video"
    assert entry["video_url"] == f"/api/videos/{artifact_id}"

    points = client.get("/api/users/wallet-a/points").json()
    assert points["points"] == 26


def test_audio_generation_and_credit_exhaustion(app_config, session_factory) -> None:
    client = TestClient(create_app(app_config, mock_collaborators()))
    audio = client.post("/api/generate/audio", json={"walletAddress": "wallet-b", "script": "x"})
    assert audio.status_code == 200
    payload = client.get(f"/api/videos/job/{audio.json()['job_id']}")
    assert payload.content == SPEECH_BYTES
    assert payload.headers["content-type"] == "audio/mpeg"

    with session_factory() as session:
        session.execute(
            update(AccountModel).where(AccountModel.account_id == "wallet-b").values(balance=0)
        )
        session.commit()

    denied = client.post("/api/generate/audio", json={"walletAddress": "wallet-b", "script": "x"})
    assert denied.status_code == 402
    assert client.get("/api/wallet/wallet-b/videos").json()["count"] == 1


def test_failed_job_is_visible_through_status(app_config) -> None:
    collaborators = mock_collaborators(
        renderer=MockConfig(scenario=MockScenario.ERROR, error_message="renderer crashed")
    )
    client = TestClient(create_app(app_config, collaborators))

    response = client.post("/api/generate", json={"walletAddress": "wallet-c", "script": "x"})

    assert response.status_code == 500
    job_id = response.json()["detail"]["job_id"]
    status = client.get(f"/api/videos/status/{job_id}").json()
    assert status["status"] == "failed"
    assert status["error"] == "renderer crashed"
    assert client.get(f"/api/videos/job/{job_id}").status_code == 404
    assert client.get("/api/users/wallet-c/points").json()["points"] == 26


def test_unknown_artifacts_are_404(app_config) -> None:
    client = TestClient(create_app(app_config, mock_collaborators()))

    response = client.get("/api/videos/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"status": "error", "failure_reason": "artifact_not_found"}
    assert client.get("/api/wallet/nobody/videos").json() == {
        "wallet_address": "nobody",
        "count": 0,
        "videos": [],
    }


def test_db_health(app_config) -> None:
    client = TestClient(create_app(app_config, mock_collaborators()))

    response = client.get("/api/db/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True}
