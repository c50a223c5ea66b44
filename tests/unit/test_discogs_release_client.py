"""Unit tests for DiscogsReleaseClient: throttling, 429 retry, caching."""

from __future__ import annotations

import json

import pytest

from src.config.settings import Settings
from src.models.imports import ThrottleState
from src.providers.music_db.discogs_release_client import DiscogsReleaseClient, ImageDownload
from tests.conftest import DiscogsStub, FakeClock

IMAGE_URL = "https://i.discogs.test/R-1105012.jpg"


class TestFetchReleaseImageUrl:
    @pytest.mark.asyncio
    async def test_resolves_first_image_uri(self, release_client: DiscogsReleaseClient, discogs: DiscogsStub) -> None:
        discogs.add_release("1105012", IMAGE_URL)

        url = await release_client.fetch_release_image_url("1105012", ThrottleState())

        assert url == IMAGE_URL
        request = discogs.release_requests[0]
        assert str(request.url) == "https://api.discogs.test/releases/1105012"
        assert request.headers["Accept"] == "application/json"
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_falls_back_to_uri150(self, release_client: DiscogsReleaseClient, discogs: DiscogsStub) -> None:
        discogs.add_release("3", uri150="https://i.discogs.test/R-3-150.jpg")
        assert await release_client.fetch_release_image_url("3", ThrottleState()) == "https://i.discogs.test/R-3-150.jpg"

    @pytest.mark.asyncio
    async def test_release_without_images(self, release_client: DiscogsReleaseClient, discogs: DiscogsStub) -> None:
        discogs.add_release("4")
        state = ThrottleState()

        assert await release_client.fetch_release_image_url("4", state) == ""
        assert state.image_url_cache == {"4": ""}

    @pytest.mark.asyncio
    async def test_blank_release_id_makes_no_request(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub
    ) -> None:
        assert await release_client.fetch_release_image_url("  ", ThrottleState()) == ""
        assert discogs.requests == []

    @pytest.mark.asyncio
    async def test_result_cached_per_run(self, release_client: DiscogsReleaseClient, discogs: DiscogsStub) -> None:
        discogs.add_release("1105012", IMAGE_URL)
        state = ThrottleState()

        await release_client.fetch_release_image_url("1105012", state)
        await release_client.fetch_release_image_url("1105012", state)

        assert len(discogs.release_requests) == 1

    @pytest.mark.asyncio
    async def test_error_status_cached_as_no_image(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub
    ) -> None:
        state = ThrottleState()

        assert await release_client.fetch_release_image_url("404404", state) == ""
        assert await release_client.fetch_release_image_url("404404", state) == ""
        assert state.image_url_cache == {"404404": ""}
        assert len(discogs.release_requests) == 1

    @pytest.mark.asyncio
    async def test_malformed_json_propagates(self, release_client: DiscogsReleaseClient, discogs: DiscogsStub) -> None:
        discogs.add_release_response("9", 200, text="<html>not json</html>")
        with pytest.raises(json.JSONDecodeError):
            await release_client.fetch_release_image_url("9", ThrottleState())

    @pytest.mark.asyncio
    async def test_token_sent_as_authorization_header(
        self,
        http_client,  # noqa: ANN001
        settings: Settings,
        fake_clock: FakeClock,
        discogs: DiscogsStub,
    ) -> None:
        discogs.add_release("1", IMAGE_URL)
        client = DiscogsReleaseClient(
            http_client,
            settings.model_copy(update={"discogs_token": "s3cret"}),
            clock=fake_clock,
            sleep=fake_clock.sleep,
        )

        await client.fetch_release_image_url("1", ThrottleState())

        assert discogs.release_requests[0].headers["Authorization"] == "Discogs token=s3cret"


class TestThrottle:
    @pytest.mark.asyncio
    async def test_first_request_is_not_delayed(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub, fake_clock: FakeClock
    ) -> None:
        discogs.add_release("1", IMAGE_URL)
        await release_client.fetch_release_image_url("1", ThrottleState())
        assert fake_clock.sleeps == []

    @pytest.mark.asyncio
    async def test_consecutive_requests_spaced_by_min_interval(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub, fake_clock: FakeClock
    ) -> None:
        discogs.add_release("1", IMAGE_URL)
        discogs.add_release("2", IMAGE_URL)
        state = ThrottleState()

        await release_client.fetch_release_image_url("1", state)
        await release_client.fetch_release_image_url("2", state)

        first, second = discogs.request_times
        assert second - first == pytest.approx(1.2)

    @pytest.mark.asyncio
    async def test_separate_runs_do_not_share_state(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub, fake_clock: FakeClock
    ) -> None:
        discogs.add_release("1", IMAGE_URL)

        await release_client.fetch_release_image_url("1", ThrottleState())
        await release_client.fetch_release_image_url("1", ThrottleState())

        assert len(discogs.release_requests) == 2


class TestRateLimitRetry:
    @pytest.mark.asyncio
    async def test_429_retried_once_after_retry_after(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub, fake_clock: FakeClock
    ) -> None:
        discogs.add_release_response("1", 429, headers={"Retry-After": "1"})
        discogs.add_release("1", IMAGE_URL)
        state = ThrottleState()

        url = await release_client.fetch_release_image_url("1", state)

        assert url == IMAGE_URL
        assert len(discogs.release_requests) == 2
        first, second = discogs.request_times
        assert second - first >= 1.0
        assert fake_clock.sleeps[0] == pytest.approx(1.0)

        # Cached: no further traffic for the same release.
        assert await release_client.fetch_release_image_url("1", state) == IMAGE_URL
        assert len(discogs.release_requests) == 2

    @pytest.mark.asyncio
    async def test_missing_retry_after_defaults_to_two_seconds(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub, fake_clock: FakeClock
    ) -> None:
        discogs.add_release_response("1", 429)
        discogs.add_release("1", IMAGE_URL)

        await release_client.fetch_release_image_url("1", ThrottleState())

        assert fake_clock.sleeps[0] == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_retry_after_below_floor_waits_one_second(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub, fake_clock: FakeClock
    ) -> None:
        discogs.add_release_response("1", 429, headers={"Retry-After": "0"})
        discogs.add_release("1", IMAGE_URL)

        await release_client.fetch_release_image_url("1", ThrottleState())

        assert fake_clock.sleeps[0] == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_second_429_gives_up(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub
    ) -> None:
        discogs.add_release_response("1", 429, headers={"Retry-After": "1"})
        state = ThrottleState()

        assert await release_client.fetch_release_image_url("1", state) == ""
        assert len(discogs.release_requests) == 2
        assert state.image_url_cache == {"1": ""}


class TestDownloadImage:
    @pytest.mark.asyncio
    async def test_returns_bytes_and_content_type(
        self, release_client: DiscogsReleaseClient, discogs: DiscogsStub
    ) -> None:
        discogs.add_image(IMAGE_URL, content=b"png-bytes", content_type="image/png")

        download = await release_client.download_image(IMAGE_URL)

        assert download == ImageDownload(content=b"png-bytes", content_type="image/png")
        assert discogs.image_requests[0].headers["Accept"] == "image/*,*/*"

    @pytest.mark.asyncio
    async def test_error_status_returns_none(self, release_client: DiscogsReleaseClient) -> None:
        assert await release_client.download_image("https://i.discogs.test/missing.jpg") is None


class TestExtractImageUrl:
    @pytest.mark.parametrize(
        "payload",
        [None, [], {}, {"images": []}, {"images": "x"}, {"images": ["x"]}, {"images": [{}]}],
    )
    def test_missing_shapes(self, payload: object) -> None:
        assert DiscogsReleaseClient.extract_image_url(payload) == ""

    def test_prefers_uri(self) -> None:
        payload = {"images": [{"uri": "a.jpg", "uri150": "b.jpg"}, {"uri": "c.jpg"}]}
        assert DiscogsReleaseClient.extract_image_url(payload) == "a.jpg"
