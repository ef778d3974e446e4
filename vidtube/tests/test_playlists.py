"""
Tests for Playlist API endpoints
"""

import asyncio
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient

from vidtube.core.exceptions import InvalidArgumentError
from vidtube.core.locks import row_locks
from vidtube.models import Playlist
from vidtube.services import PlaylistService
from vidtube.tests.conftest import bearer


async def create_playlist(client: AsyncClient, headers: dict, **params) -> dict:
    response = await client.post(
        "/api/v1/playlist/",
        json={"name": "Favourites", "description": "Videos I like"},
        params=params,
        headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestPlaylistAPI:
    """Test playlist endpoints"""

    async def test_create_playlist(self, client: AsyncClient, test_user, auth_headers):
        playlist = await create_playlist(client, auth_headers)

        assert playlist["name"] == "Favourites"
        assert playlist["owner_id"] == str(test_user.id)
        assert playlist["videos"] == []

    async def test_create_with_initial_video(self, client: AsyncClient, test_user, auth_headers, make_video):
        video = await make_video(test_user)

        playlist = await create_playlist(client, auth_headers, videoId=str(video.id))
        assert playlist["videos"] == [str(video.id)]

    async def test_create_requires_name(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/playlist/",
            json={"name": "  ", "description": "Videos I like"},
            headers=auth_headers
        )
        assert response.status_code == 400

    async def test_add_and_remove_keeps_order(self, client: AsyncClient, test_db, test_user, auth_headers, make_video):
        """add A, B, C then remove B leaves [A, C]"""
        a, b, c = [await make_video(test_user, title) for title in ("A", "B", "C")]
        playlist = await create_playlist(client, auth_headers)

        for video in (a, b, c):
            response = await client.patch(
                f"/api/v1/playlist/add/{video.id}/{playlist['id']}", headers=auth_headers
            )
            assert response.status_code == 200

        response = await client.patch(f"/api/v1/playlist/remove/{b.id}/{playlist['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["videos"] == [str(a.id), str(c.id)]

        stored = await test_db.get(Playlist, UUID(playlist["id"]))
        assert stored.videos == [str(a.id), str(c.id)]

        response = await client.get(f"/api/v1/playlist/{playlist['id']}")
        view = response.json()["data"]
        assert [video["title"] for video in view["videos"]] == ["A", "C"]
        assert view["owner"]["username"] == test_user.username

    async def test_add_is_idempotent(self, client: AsyncClient, test_user, auth_headers, make_video):
        video = await make_video(test_user)
        playlist = await create_playlist(client, auth_headers)

        for _ in range(2):
            response = await client.patch(
                f"/api/v1/playlist/add/{video.id}/{playlist['id']}", headers=auth_headers
            )
        assert response.json()["data"]["videos"] == [str(video.id)]

    async def test_remove_absent_video_is_noop(self, client: AsyncClient, test_user, auth_headers, make_video):
        video = await make_video(test_user)
        playlist = await create_playlist(client, auth_headers, videoId=str(video.id))

        response = await client.patch(f"/api/v1/playlist/remove/{uuid4()}/{playlist['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["videos"] == [str(video.id)]

    async def test_add_missing_video(self, client: AsyncClient, auth_headers):
        playlist = await create_playlist(client, auth_headers)

        response = await client.patch(f"/api/v1/playlist/add/{uuid4()}/{playlist['id']}", headers=auth_headers)
        assert response.status_code == 404

    async def test_only_owner_can_modify(self, client: AsyncClient, test_user, auth_headers, make_user, make_video):
        video = await make_video(test_user)
        playlist = await create_playlist(client, auth_headers)
        intruder = bearer(await make_user("intruder"))

        response = await client.patch(f"/api/v1/playlist/add/{video.id}/{playlist['id']}", headers=intruder)
        assert response.status_code == 403
        assert response.json()["error_type"] == "PermissionDeniedError"

        response = await client.patch(
            f"/api/v1/playlist/{playlist['id']}", json={"name": "Mine now"}, headers=intruder
        )
        assert response.status_code == 403

        response = await client.delete(f"/api/v1/playlist/{playlist['id']}", headers=intruder)
        assert response.status_code == 403

    async def test_update_playlist(self, client: AsyncClient, auth_headers):
        playlist = await create_playlist(client, auth_headers)

        response = await client.patch(
            f"/api/v1/playlist/{playlist['id']}", json={"name": "Renamed"}, headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Renamed"
        assert data["description"] == "Videos I like"

    async def test_update_without_fields(self, client: AsyncClient, auth_headers):
        playlist = await create_playlist(client, auth_headers)

        response = await client.patch(f"/api/v1/playlist/{playlist['id']}", json={}, headers=auth_headers)
        assert response.status_code == 400

    async def test_delete_playlist(self, client: AsyncClient, auth_headers):
        playlist = await create_playlist(client, auth_headers)

        response = await client.delete(f"/api/v1/playlist/{playlist['id']}", headers=auth_headers)
        assert response.status_code == 200

        response = await client.get(f"/api/v1/playlist/{playlist['id']}")
        assert response.status_code == 404

    async def test_deleted_videos_dropped_from_view(self, client: AsyncClient, test_user, auth_headers, make_video):
        kept = await make_video(test_user, "Kept")
        gone = await make_video(test_user, "Gone")
        playlist = await create_playlist(client, auth_headers, videoId=str(gone.id))
        await client.patch(f"/api/v1/playlist/add/{kept.id}/{playlist['id']}", headers=auth_headers)

        await client.delete(f"/api/v1/videos/{gone.id}", headers=auth_headers)

        response = await client.get(f"/api/v1/playlist/{playlist['id']}")
        assert [video["title"] for video in response.json()["data"]["videos"]] == ["Kept"]

    async def test_user_playlists_recently_updated_first(self, client: AsyncClient, test_user, auth_headers, make_video):
        video = await make_video(test_user, "Clip")
        first = await create_playlist(client, auth_headers)
        await create_playlist(client, auth_headers)
        await client.patch(f"/api/v1/playlist/add/{video.id}/{first['id']}", headers=auth_headers)

        response = await client.get(f"/api/v1/playlist/user/{test_user.id}")
        assert response.status_code == 200
        playlists = response.json()["data"]
        assert playlists[0]["id"] == first["id"]
        assert playlists[0]["videos"][0]["title"] == "Clip"
        assert playlists[1]["videos"] == []

    async def test_playlists_of_unknown_user(self, client: AsyncClient):
        response = await client.get(f"/api/v1/playlist/user/{uuid4()}")
        assert response.status_code == 404

    async def test_create_rejects_overlong_name(self, test_db, test_user):
        with pytest.raises(InvalidArgumentError):
            await PlaylistService.create_playlist(test_db, test_user.id, "x" * 201, "Too long")


class TestConcurrentMembership:
    """Membership edits on one playlist never overwrite each other"""

    async def test_concurrent_adds_keep_every_video(self, session_factory, test_db, test_user, make_video):
        videos = [await make_video(test_user, title) for title in ("A", "B", "C")]
        playlist = await PlaylistService.create_playlist(test_db, test_user.id, "Mix", "Everything")

        async def add(video):
            async with session_factory() as session:
                return await PlaylistService.add_video(session, playlist.id, video.id, test_user.id)

        await asyncio.gather(*(add(video) for video in videos))

        await test_db.refresh(playlist)
        assert sorted(playlist.videos) == sorted(str(video.id) for video in videos)
        assert len(row_locks) == 0

    async def test_concurrent_add_and_remove(self, session_factory, test_db, test_user, make_video):
        kept, removed, added = [await make_video(test_user, title) for title in ("Kept", "Removed", "Added")]
        playlist = await PlaylistService.create_playlist(test_db, test_user.id, "Mix", "Everything", kept.id)
        await PlaylistService.add_video(test_db, playlist.id, removed.id, test_user.id)

        async def add():
            async with session_factory() as session:
                await PlaylistService.add_video(session, playlist.id, added.id, test_user.id)

        async def remove():
            async with session_factory() as session:
                await PlaylistService.remove_video(session, playlist.id, removed.id, test_user.id)

        await asyncio.gather(add(), remove())

        await test_db.refresh(playlist)
        assert playlist.videos == [str(kept.id), str(added.id)]
