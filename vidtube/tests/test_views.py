"""
Tests for channel, watch history, liked videos and subscription read models
"""

import asyncio

import pytest
from httpx import AsyncClient

from vidtube.core.exceptions import InvalidArgumentError
from vidtube.core.locks import row_locks
from vidtube.models import Like, LikeTargetKind, Subscription
from vidtube.services import VideoService, ViewService
from vidtube.tests.conftest import bearer, minutes_ago


class TestChannelProfile:
    """Test the channel page header"""

    async def test_counts_and_is_subscribed(self, client: AsyncClient, test_db, make_user):
        channel = await make_user("channel")
        viewer = await make_user("viewer")
        others = [await make_user(f"other{i}") for i in range(2)]

        test_db.add_all(
            [Subscription(subscriber_id=user.id, channel_id=channel.id) for user in [viewer] + others]
            + [Subscription(subscriber_id=channel.id, channel_id=user.id) for user in others]
        )
        await test_db.commit()

        response = await client.get("/api/v1/users/c/channel", headers=bearer(viewer))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["subscribers_count"] == 3
        assert data["subscribed_to_count"] == 2
        assert data["is_subscribed"] is True
        assert data["username"] == "channel"

        response = await client.get("/api/v1/users/c/channel", headers=bearer(others[0]))
        assert response.json()["data"]["is_subscribed"] is True

        response = await client.get("/api/v1/users/c/channel")
        assert response.json()["data"]["is_subscribed"] is False

    async def test_username_is_case_insensitive(self, client: AsyncClient, test_user):
        response = await client.get("/api/v1/users/c/TestUser")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(test_user.id)

    async def test_unknown_channel(self, client: AsyncClient):
        response = await client.get("/api/v1/users/c/ghost")

        assert response.status_code == 404
        assert response.json()["message"] == "Channel does not exist"

    async def test_blank_username(self, test_db):
        with pytest.raises(InvalidArgumentError):
            await ViewService.get_channel_profile(test_db, "   ")


class TestWatchHistory:
    """Test watch history recording and expansion"""

    async def test_history_keeps_order_and_repeats(self, client: AsyncClient, test_user, auth_headers, make_user, make_video):
        creator = await make_user("creator")
        first = await make_video(creator, "First")
        second = await make_video(creator, "Second")

        for video in (first, second, first):
            response = await client.get(f"/api/v1/videos/{video.id}", headers=auth_headers)
            assert response.status_code == 200

        response = await client.get("/api/v1/users/history", headers=auth_headers)
        assert response.status_code == 200
        history = response.json()["data"]
        assert [item["title"] for item in history] == ["First", "Second", "First"]
        assert history[0]["owner"]["username"] == "creator"
        assert history[0]["video_url"] == first.video_url

    async def test_history_skips_deleted_videos(self, client: AsyncClient, test_db, test_user, auth_headers, make_video):
        kept = await make_video(test_user, "Kept")
        gone = await make_video(test_user, "Gone")
        for video in (kept, gone):
            await client.get(f"/api/v1/videos/{video.id}", headers=auth_headers)

        response = await client.delete(f"/api/v1/videos/{gone.id}", headers=auth_headers)
        assert response.status_code == 200

        response = await client.get("/api/v1/users/history", headers=auth_headers)
        assert [item["title"] for item in response.json()["data"]] == ["Kept"]

    async def test_anonymous_views_are_not_recorded(self, client: AsyncClient, test_db, test_user, make_video):
        video = await make_video(test_user)

        response = await client.get(f"/api/v1/videos/{video.id}")
        assert response.status_code == 200
        assert response.json()["data"]["views"] == 1

        await test_db.refresh(test_user)
        assert test_user.watch_history == []

    async def test_concurrent_views_are_all_recorded(self, session_factory, test_db, test_user, make_user, make_video):
        creator = await make_user("creator")
        videos = [await make_video(creator) for _ in range(3)]

        async def watch(video):
            async with session_factory() as session:
                await VideoService.get_video(session, video.id, test_user.id)

        await asyncio.gather(*(watch(video) for video in videos))

        await test_db.refresh(test_user)
        assert sorted(test_user.watch_history) == sorted(str(video.id) for video in videos)
        assert len(row_locks) == 0


class TestLikedVideos:
    """Test the liked videos list"""

    async def test_no_liked_videos(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/v1/likes/videos", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "No liked videos found"

    async def test_newest_like_first(self, client: AsyncClient, test_db, test_user, auth_headers, make_user, make_video):
        creator = await make_user("creator")
        older = await make_video(creator, "Older like")
        newer = await make_video(creator, "Newer like")
        test_db.add_all([
            Like(liked_by=test_user.id, target_kind=LikeTargetKind.VIDEO, target_id=older.id, created_at=minutes_ago(10)),
            Like(liked_by=test_user.id, target_kind=LikeTargetKind.VIDEO, target_id=newer.id, created_at=minutes_ago(1)),
        ])
        await test_db.commit()

        response = await client.get("/api/v1/likes/videos", headers=auth_headers)
        assert response.status_code == 200
        videos = response.json()["data"]
        assert [video["title"] for video in videos] == ["Newer like", "Older like"]
        assert videos[0]["owner"]["username"] == "creator"

    async def test_comment_likes_are_not_videos(self, client: AsyncClient, test_db, test_user, auth_headers, make_video):
        video = await make_video(test_user)
        await client.post(
            f"/api/v1/comments/{video.id}", json={"content": "Nice"}, headers=auth_headers
        )
        comments = (await client.get(f"/api/v1/comments/{video.id}")).json()["data"]["items"]
        await client.post(f"/api/v1/likes/toggle/c/{comments[0]['id']}", headers=auth_headers)

        response = await client.get("/api/v1/likes/videos", headers=auth_headers)
        assert response.status_code == 404


class TestTweetsView:

    async def test_user_tweets_newest_first(self, client: AsyncClient, test_user, auth_headers):
        for content in ("one", "two"):
            response = await client.post("/api/v1/tweets/", json={"content": content}, headers=auth_headers)
            assert response.status_code == 201

        response = await client.get(f"/api/v1/tweets/user/{test_user.id}")
        assert response.status_code == 200
        tweets = response.json()["data"]
        assert [tweet["content"] for tweet in tweets] == ["two", "one"]
        assert tweets[0]["owner"]["full_name"] == "Test User"
