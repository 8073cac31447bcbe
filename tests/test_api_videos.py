import uuid

from fastapi.testclient import TestClient

from tubely.db.repositories.videos import VideoRepository
from tubely.features.media.process import ProcessResult
from tubely.main import app

from conftest import staged_files

MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 1024


def upload_url(video_id) -> str:
    return f"/api/v1/videos/{video_id}/upload"


def mp4_file(data: bytes = MP4, media_type: str = "video/mp4"):
    return {"video": ("boots.mp4", data, media_type)}


# -----------------------------
# Upload
# -----------------------------
def test_upload_video(client, settings, session, owner, video, auth_header, fake_s3):
    res = client.post(upload_url(video.id), files=mp4_file(), headers=auth_header(owner))

    assert res.status_code == 200, res.text
    body = res.json()
    (_, key), = fake_s3.objects.keys()
    assert key.startswith("videos/landscape/")
    assert body["id"] == str(video.id)
    assert body["video_url"] == f"https://tubely-test.s3.eu-west-3.amazonaws.com/{key}"
    assert staged_files(settings) == []


def test_upload_invalid_id(client, owner, auth_header):
    res = client.post(upload_url("not-a-uuid"), files=mp4_file(), headers=auth_header(owner))
    assert res.status_code == 400
    assert res.json() == {"detail": "Invalid video ID"}


def test_upload_invalid_id_checked_before_auth(client):
    res = client.post(upload_url("not-a-uuid"), files=mp4_file())
    assert res.status_code == 400


def test_upload_without_token(client, video):
    res = client.post(upload_url(video.id), files=mp4_file())
    assert res.status_code == 401
    assert res.headers["www-authenticate"] == "Bearer"


def test_upload_with_bad_token(client, video):
    res = client.post(upload_url(video.id), files=mp4_file(), headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401


def test_upload_unknown_video(client, owner, auth_header):
    res = client.post(upload_url(uuid.uuid4()), files=mp4_file(), headers=auth_header(owner))
    assert res.status_code == 404


def test_upload_not_owner(client, settings, session, stranger, video, auth_header, fake_runner):
    res = client.post(upload_url(video.id), files=mp4_file(), headers=auth_header(stranger))

    assert res.status_code == 403
    assert fake_runner.calls == []
    assert staged_files(settings) == []
    session.expire_all()
    assert VideoRepository(session).get(video.id).video_url is None


def test_upload_missing_field(client, owner, video, auth_header):
    res = client.post(
        upload_url(video.id),
        files={"file": ("boots.mp4", MP4, "video/mp4")},
        headers=auth_header(owner),
    )
    assert res.status_code == 400
    assert res.json() == {"detail": "Invalid Video"}


def test_upload_wrong_type(client, settings, owner, video, auth_header):
    res = client.post(upload_url(video.id), files=mp4_file(media_type="video/quicktime"), headers=auth_header(owner))
    assert res.status_code == 400
    assert res.json() == {"detail": "Invalid File Type"}
    assert staged_files(settings) == []


def test_upload_too_big(client, settings, owner, video, auth_header, fake_runner):
    settings.MAX_VIDEO_UPLOAD_BYTES = 512
    res = client.post(upload_url(video.id), files=mp4_file(), headers=auth_header(owner))
    assert res.status_code == 400
    assert res.json() == {"detail": "File Too Big"}
    assert fake_runner.calls == []
    assert staged_files(settings) == []


def test_upload_probe_failure_hides_stderr(client, settings, session, owner, video, auth_header, fake_runner, fake_s3):
    fake_runner.probe_result = ProcessResult(1, b"", b"/tmp/assets/secret-name.mp4: Invalid data")

    res = client.post(upload_url(video.id), files=mp4_file(), headers=auth_header(owner))

    assert res.status_code == 500
    assert "secret-name" not in res.text
    assert fake_s3.objects == {}
    assert staged_files(settings) == []
    session.expire_all()
    assert VideoRepository(session).get(video.id).video_url is None


# -----------------------------
# CRUD
# -----------------------------
def test_create_list_get_delete(client, owner, stranger, auth_header):
    res = client.post("/api/v1/videos", json={"title": "Intro", "description": "first"}, headers=auth_header(owner))
    assert res.status_code == 201
    created = res.json()
    assert created["user_id"] == owner.id
    assert created["video_url"] is None

    res = client.get("/api/v1/videos", headers=auth_header(owner))
    assert [v["id"] for v in res.json()] == [created["id"]]
    assert client.get("/api/v1/videos", headers=auth_header(stranger)).json() == []

    assert client.get(f"/api/v1/videos/{created['id']}", headers=auth_header(owner)).json()["title"] == "Intro"
    assert client.get(f"/api/v1/videos/{created['id']}", headers=auth_header(stranger)).status_code == 403

    assert client.delete(f"/api/v1/videos/{created['id']}", headers=auth_header(stranger)).status_code == 403
    assert client.delete(f"/api/v1/videos/{created['id']}", headers=auth_header(owner)).status_code == 204
    assert client.get(f"/api/v1/videos/{created['id']}", headers=auth_header(owner)).status_code == 404


def test_create_requires_auth(client):
    res = client.post("/api/v1/videos", json={"title": "Intro"})
    assert res.status_code == 401


# -----------------------------
# Corps trop gros : refusé sur Content-Length
# -----------------------------
def counting_client(received):
    async def counting_app(scope, receive, send):
        async def counting_receive():
            message = await receive()
            received.append(len(message.get("body", b"")))
            return message
        await app(scope, counting_receive, send)
    return TestClient(counting_app)


def test_oversized_upload_rejected_before_body_is_read(client, settings, owner, video, auth_header, fake_runner):
    settings.MAX_VIDEO_UPLOAD_BYTES = 512
    received = []

    res = counting_client(received).post(
        upload_url(video.id),
        files=mp4_file(MP4 + b"\x00" * (8 << 20)),
        headers=auth_header(owner),
    )

    assert res.status_code == 400
    assert res.json() == {"detail": "File Too Big"}
    assert sum(received) == 0
    assert fake_runner.calls == []
    assert staged_files(settings) == []


def test_oversized_upload_still_checks_ownership_first(client, settings, stranger, video, auth_header):
    settings.MAX_VIDEO_UPLOAD_BYTES = 512
    received = []

    res = counting_client(received).post(
        upload_url(video.id),
        files=mp4_file(MP4 + b"\x00" * (8 << 20)),
        headers=auth_header(stranger),
    )

    assert res.status_code == 403
    assert sum(received) == 0
