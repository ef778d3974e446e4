"""
Tests for Video API endpoints
"""

from uuid import uuid4

from httpx import AsyncClient
from sqlalchemy import select

from vidtube.models import Video
from vidtube.services.media_storage import IMAGES
from vidtube.tests.conftest import bearer

MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 128
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 64


def upload_files(video: bool = True, thumbnail: bool = True) -> dict:
    files = {}
    if video:
        files["video_file"] = ("clip.mp4", MP4_BYTES, "video/mp4")
    if thumbnail:
        files["thumbnail"] = ("thumb.jpg", JPEG_BYTES, "image/jpeg")
    return files


class TestVideoAPI:
    """Test video endpoints"""

    async def test_publish_video(self, client: AsyncClient, test_user, auth_headers, fake_storage):
        response = await client.post(
            "/api/v1/videos/",
            data={"title": "My first video", "description": "Hello world"},
            files=upload_files(),
            headers=auth_headers
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["title"] == "My first video"
        assert data["owner_id"] == str(test_user.id)
        assert data["duration"] == fake_storage.video_duration
        assert data["views"] == 0
        assert data["is_published"] is True
        assert data["video_url"] in fake_storage.uploaded
        assert data["thumbnail_url"] in fake_storage.uploaded

    async def test_publish_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/videos/", data={"title": "x"}, files=upload_files())
        assert response.status_code == 401

    async def test_publish_without_thumbnail(self, client: AsyncClient, auth_headers, fake_storage):
        response = await client.post(
            "/api/v1/videos/",
            data={"title": "No thumbnail"},
            files=upload_files(thumbnail=False),
            headers=auth_headers
        )

        assert response.status_code == 400
        assert fake_storage.uploaded == []

    async def test_publish_blank_title(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/videos/", data={"title": "   "}, files=upload_files(), headers=auth_headers
        )
        assert response.status_code == 400

    async def test_publish_overlong_title(self, client: AsyncClient, auth_headers, fake_storage):
        response = await client.post(
            "/api/v1/videos/", data={"title": "t" * 201}, files=upload_files(), headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "title"
        assert fake_storage.uploaded == []

    async def test_thumbnail_failure_removes_uploaded_video(self, client: AsyncClient, test_db, auth_headers, fake_storage):
        fake_storage.fail_categories.add(IMAGES)

        response = await client.post(
            "/api/v1/videos/",
            data={"title": "Broken thumbnail"},
            files=upload_files(),
            headers=auth_headers
        )

        assert response.status_code == 500
        assert response.json()["error_type"] == "MediaUploadError"
        assert fake_storage.deleted == fake_storage.uploaded
        assert len(fake_storage.deleted) == 1

    async def test_missing_duration_is_upload_error(self, client: AsyncClient, auth_headers, fake_storage):
        fake_storage.video_duration = None

        response = await client.post(
            "/api/v1/videos/", data={"title": "No duration"}, files=upload_files(), headers=auth_headers
        )
        assert response.status_code == 500

    async def test_get_video_counts_views(self, client: AsyncClient, test_user, make_video):
        video = await make_video(test_user)

        for expected in (1, 2):
            response = await client.get(f"/api/v1/videos/{video.id}")
            assert response.status_code == 200
            assert response.json()["data"]["views"] == expected

    async def test_unpublished_video_only_visible_to_owner(self, client: AsyncClient, test_user, auth_headers, make_user, make_video):
        video = await make_video(test_user, "Draft", is_published=False)

        response = await client.get(f"/api/v1/videos/{video.id}")
        assert response.status_code == 404

        response = await client.get(f"/api/v1/videos/{video.id}", headers=bearer(await make_user("stranger")))
        assert response.status_code == 404

        response = await client.get(f"/api/v1/videos/{video.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["views"] == 1

    async def test_get_missing_video(self, client: AsyncClient):
        response = await client.get(f"/api/v1/videos/{uuid4()}")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error_type"] == "NotFoundError"

    async def test_get_video_invalid_id(self, client: AsyncClient):
        response = await client.get("/api/v1/videos/not-a-uuid")
        assert response.status_code == 400

    async def test_update_video(self, client: AsyncClient, test_user, auth_headers, make_video, fake_storage):
        video = await make_video(test_user)
        old_thumbnail = video.thumbnail_url

        response = await client.patch(
            f"/api/v1/videos/{video.id}",
            data={"title": "Better title"},
            files={"thumbnail": ("new.jpg", JPEG_BYTES, "image/jpeg")},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Better title"
        assert data["description"] == video.description
        assert data["thumbnail_url"] in fake_storage.uploaded
        assert fake_storage.deleted == [old_thumbnail]

    async def test_update_overlong_title(self, client: AsyncClient, test_user, auth_headers, make_video, fake_storage):
        video = await make_video(test_user)

        response = await client.patch(
            f"/api/v1/videos/{video.id}",
            data={"title": "t" * 201},
            files={"thumbnail": ("new.jpg", JPEG_BYTES, "image/jpeg")},
            headers=auth_headers
        )
        assert response.status_code == 400
        assert fake_storage.uploaded == []

    async def test_update_by_non_owner(self, client: AsyncClient, test_user, make_user, make_video):
        video = await make_video(test_user)
        stranger = await make_user("stranger")

        response = await client.patch(
            f"/api/v1/videos/{video.id}", data={"title": "Hijacked"}, headers=bearer(stranger)
        )
        assert response.status_code == 403

    async def test_delete_video(self, client: AsyncClient, test_db, test_user, auth_headers, make_video, fake_storage):
        video = await make_video(test_user)

        response = await client.delete(f"/api/v1/videos/{video.id}", headers=auth_headers)

        assert response.status_code == 200
        assert set(fake_storage.deleted) == {video.video_url, video.thumbnail_url}
        assert (await test_db.execute(select(Video).where(Video.id == video.id))).first() is None

    async def test_delete_survives_unparseable_media_url(self, client: AsyncClient, test_db, test_user, auth_headers, make_video, fake_storage):
        video = await make_video(test_user, video_url="https://elsewhere.example.com/clip.mp4")

        response = await client.delete(f"/api/v1/videos/{video.id}", headers=auth_headers)

        assert response.status_code == 200
        assert fake_storage.deleted == [video.thumbnail_url]
        assert (await test_db.execute(select(Video).where(Video.id == video.id))).first() is None

    async def test_delete_by_non_owner(self, client: AsyncClient, test_user, make_user, make_video, fake_storage):
        video = await make_video(test_user)
        stranger = await make_user("stranger")

        response = await client.delete(f"/api/v1/videos/{video.id}", headers=bearer(stranger))
        assert response.status_code == 403
        assert fake_storage.deleted == []

    async def test_toggle_publish(self, client: AsyncClient, test_user, auth_headers, make_video):
        video = await make_video(test_user)

        response = await client.patch(f"/api/v1/videos/toggle/publish/{video.id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["is_published"] is False

        response = await client.patch(f"/api/v1/videos/toggle/publish/{video.id}", headers=auth_headers)
        assert response.json()["data"]["is_published"] is True


class TestHealthcheck:

    async def test_healthcheck(self, client: AsyncClient):
        response = await client.get("/api/v1/healthcheck/")

        assert response.status_code == 200
        assert response.json()["success"] is True

    async def test_unknown_route_uses_envelope(self, client: AsyncClient):
        response = await client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json()["success"] is False
