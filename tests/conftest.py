"""Shared pytest fixtures for the vinyl catalog test suite."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
import yaml

from src.config.settings import Settings
from src.providers.catalog.markdown_vault_store import MarkdownVaultStore
from src.providers.music_db.discogs_release_client import DiscogsReleaseClient
from src.services.cover_service import CoverService

ARTISTS = "Vinyl/Artists"
COVERS = "Vinyl/covers"

DISCOGS_HEADER = (
    "Catalog#,Artist,Title,Label,Format,Rating,Released,release_id,CollectionFolder,"
    "Date Added,Collection Media Condition,Collection Sleeve Condition,Collection Notes"
)


def discogs_csv(*rows: str) -> str:
    """Join *rows* under the standard Discogs export header."""
    return "\n".join([DISCOGS_HEADER, *rows]) + "\n"


# ---------------------------------------------------------------------------
# Vault helpers
# ---------------------------------------------------------------------------


def write_note(root: Path, path: str, metadata: dict[str, Any] | None, body: str = "") -> Path:
    """Write a Markdown note with YAML frontmatter directly to disk."""
    target = root / path
    target.parent.mkdir(parents=True, exist_ok=True)
    if metadata is None:
        target.write_text(body, encoding="utf-8")
    else:
        dumped = yaml.safe_dump(metadata, allow_unicode=True, sort_keys=False).rstrip()
        target.write_text(f"---\n{dumped}\n---\n\n{body}", encoding="utf-8")
    return target


def read_note_metadata(root: Path, path: str) -> dict[str, Any]:
    """Parse the frontmatter of a note on disk."""
    text = (root / path).read_text(encoding="utf-8")
    assert text.startswith("---\n"), f"{path} has no frontmatter"
    raw = text.split("\n---", 1)[0][len("---\n"):]
    return yaml.safe_load(raw) or {}


def record_notes(root: Path) -> list[str]:
    """All record note paths under the artists folder, sorted."""
    base = root / ARTISTS
    if not base.exists():
        return []
    return sorted(p.relative_to(root).as_posix() for p in base.rglob("*.md"))


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock that only moves when ``sleep`` is awaited."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


# ---------------------------------------------------------------------------
# Discogs HTTP stub
# ---------------------------------------------------------------------------


class DiscogsStub:
    """Programmable ``httpx.MockTransport`` handler for the Discogs API and image CDN.

    ``releases`` maps a release id to a list of responses served in order
    (the last one repeats).  ``images`` maps an image URL to
    ``(content, content_type)``.  Every request is recorded together with
    the fake clock's time at which it was sent.
    """

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.clock = clock
        self.releases: dict[str, list[Callable[[], httpx.Response]]] = {}
        self.images: dict[str, tuple[bytes, str]] = {}
        self.requests: list[httpx.Request] = []
        self.request_times: list[float] = []

    def add_release(self, release_id: str, image_uri: str | None = None, **image_fields: str) -> None:
        images = []
        if image_uri is not None or image_fields:
            images.append({"uri": image_uri or "", **image_fields})
        payload = {"id": release_id, "images": images}
        self.releases.setdefault(release_id, []).append(lambda: httpx.Response(200, json=payload))

    def add_release_response(
        self,
        release_id: str,
        status_code: int,
        headers: dict[str, str] | None = None,
        text: str = "",
    ) -> None:
        self.releases.setdefault(release_id, []).append(
            lambda: httpx.Response(status_code, headers=headers, text=text)
        )

    def add_image(self, url: str, content: bytes = b"\xff\xd8\xff-jpeg", content_type: str = "image/jpeg") -> None:
        self.images[url] = (content, content_type)

    @property
    def release_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/releases/" in r.url.path]

    @property
    def image_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/releases/" not in r.url.path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.request_times.append(self.clock.now if self.clock else 0.0)

        if request.url.path.startswith("/releases/"):
            release_id = request.url.path.rsplit("/", 1)[-1]
            queue = self.releases.get(release_id)
            if not queue:
                return httpx.Response(404, json={"message": "Release not found."})
            factory = queue.pop(0) if len(queue) > 1 else queue[0]
            return factory()

        image = self.images.get(str(request.url))
        if image is None:
            return httpx.Response(404)
        content, content_type = image
        return httpx.Response(200, content=content, headers={"Content-Type": content_type})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def vault_root(tmp_path: Path) -> Path:
    """Empty vault directory."""
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def settings(vault_root: Path) -> Settings:
    """Settings pointing at the temporary vault, isolated from any .env file."""
    return Settings(
        _env_file=None,
        vault_root=str(vault_root),
        collection_folder="Vinyl",
        artists_folder=ARTISTS,
        covers_folder=COVERS,
        discogs_api_base="https://api.discogs.test",
        discogs_token="",
        discogs_min_interval_ms=1200,
    )


@pytest.fixture
def store(vault_root: Path) -> MarkdownVaultStore:
    return MarkdownVaultStore(vault_root)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def discogs(fake_clock: FakeClock) -> DiscogsStub:
    return DiscogsStub(clock=fake_clock)


@pytest_asyncio.fixture
async def http_client(discogs: DiscogsStub) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(discogs)) as client:
        yield client


@pytest.fixture
def release_client(
    http_client: httpx.AsyncClient,
    settings: Settings,
    fake_clock: FakeClock,
) -> DiscogsReleaseClient:
    return DiscogsReleaseClient(http_client, settings, clock=fake_clock, sleep=fake_clock.sleep)


@pytest.fixture
def cover_service(
    store: MarkdownVaultStore,
    release_client: DiscogsReleaseClient,
    settings: Settings,
) -> CoverService:
    return CoverService(store, release_client, settings)
