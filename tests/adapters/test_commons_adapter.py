from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import httpx
import pytest

from meeplesync.adapters.commons import (
    CommonsClient,
    CommonsImage,
    CommonsSource,
    is_excluded,
    pick_images,
    score_image,
)
from meeplesync.config.wikimedia import DEFAULT_COMMONS_API_URL, CommonsConfig
from meeplesync.domain.enrichment import FieldClaim, IdentityHints, NotFoundError
from meeplesync.domain.model import EnrichableField
from tests.helpers.catalog import mock_client_factory, resilience

if TYPE_CHECKING:
    from tests.helpers.catalog import Handler


def _image(title: str, width: int = 1000, height: int = 1000) -> CommonsImage:
    url = f"https://upload.wikimedia.org/{title}"
    return CommonsImage(title=title, url=url, display_url=url, width=width, height=height)


def _source(handler: Handler) -> CommonsSource:
    config = CommonsConfig(resilience=resilience("commons", DEFAULT_COMMONS_API_URL))
    client = CommonsClient(config=config, client_factory=mock_client_factory(handler))
    return CommonsSource(config=config, client=client)


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("File:Wingspan logo.png", True),
        ("File:Wingspan board.svg", True),
        ("File:Commons-logo.png", True),
        ("File:Wingspan box.jpg", False),
    ],
)
def test_is_excluded(title: str, expected: bool) -> None:
    assert is_excluded(title) is expected


def test_score_image_rewards_box_art_and_name() -> None:
    box = _image("File:Wingspan_box_cover.jpg")
    table = _image("File:Game night.jpg", width=400, height=300)

    assert score_image(box, "Wingspan") == 2 * 2 + 3 + 3 + 1 + 1
    assert score_image(table, "Wingspan") == 1


def test_pick_images_returns_cover_and_largest_landscape_hero() -> None:
    cover = _image("File:Wingspan_box.jpg", 800, 800)
    small = _image("File:Wingspan table.jpg", 1200, 800)
    large = _image("File:Wingspan setup.jpg", 3000, 2000)
    portrait = _image("File:Wingspan player.jpg", 1000, 3000)

    chosen_cover, hero = pick_images([small, cover, large, portrait], "Wingspan")

    assert chosen_cover is cover
    assert hero is large


def test_pick_images_without_landscape_has_no_hero() -> None:
    only = _image("File:Wingspan_box.jpg", 800, 800)

    assert pick_images([only], "Wingspan") == (only, None)
    assert pick_images([], "Wingspan") == (None, None)


def test_fetch_searches_files_and_ranks_them() -> None:
    requests: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        requests.append(params)
        if params.get("list") == "search":
            return httpx.Response(
                200,
                json={
                    "query": {
                        "search": [
                            {"title": "File:Wingspan logo.png"},
                            {"title": "File:Wingspan_box.jpg"},
                            {"title": "File:Wingspan game in progress.jpg"},
                        ]
                    }
                },
            )
        return httpx.Response(
            200,
            json={
                "query": {
                    "pages": [
                        {
                            "title": "File:Wingspan_box.jpg",
                            "imageinfo": [
                                {
                                    "url": "https://upload.wikimedia.org/box.jpg",
                                    "thumburl": "https://upload.wikimedia.org/box-1280.jpg",
                                    "width": 2000,
                                    "height": 2000,
                                    "mime": "image/jpeg",
                                }
                            ],
                        },
                        {
                            "title": "File:Wingspan game in progress.jpg",
                            "imageinfo": [
                                {
                                    "url": "https://upload.wikimedia.org/play.jpg",
                                    "width": 4000,
                                    "height": 3000,
                                }
                            ],
                        },
                        {"title": "File:Gone.jpg", "missing": True},
                    ]
                }
            },
        )

    candidate = asyncio.run(_source(handler).fetch(IdentityHints(name="Wingspan"), timeout=5))

    assert requests[0]["srsearch"] == "Wingspan board game"
    assert requests[0]["srnamespace"] == "6"
    assert requests[1]["titles"] == "File:Wingspan_box.jpg|File:Wingspan game in progress.jpg"
    assert candidate.claim(EnrichableField.COVER_IMAGE_URL) == FieldClaim(
        "https://upload.wikimedia.org/box-1280.jpg"
    )
    assert candidate.claim(EnrichableField.HERO_IMAGE_URL) == FieldClaim(
        "https://upload.wikimedia.org/play.jpg"
    )


def test_fetch_without_usable_files_is_not_found() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params.get("list") == "search":
            return httpx.Response(200, json={"query": {"search": [{"title": "File:Icon.svg"}]}})
        return httpx.Response(200, json={"query": {"pages": []}})

    with pytest.raises(NotFoundError):
        asyncio.run(_source(handler).fetch(IdentityHints(name="Wingspan"), timeout=5))
