"""BoardGameGeek XML API v2 response models.

The ``thing`` endpoint answers XML; lxml walks the tree and pydantic validates the pieces.
"""

from __future__ import annotations

import html
from typing import TYPE_CHECKING

from lxml import etree
from pydantic import BaseModel, ConfigDict, Field

from meeplesync.adapters.source_errors import SourcePayloadError

if TYPE_CHECKING:
    from lxml.etree import _Element


class BggModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class BggName(BggModel):
    type: str = "primary"
    value: str
    sort_index: int = Field(default=1, alias="sortindex")


class BggLink(BggModel):
    type: str
    id: int
    value: str
    inbound: bool = False


class BggItem(BggModel):
    id: int
    type: str
    names: list[BggName] = Field(default_factory=list)
    year_published: int | None = None
    description: str | None = None
    image: str | None = None
    thumbnail: str | None = None
    links: list[BggLink] = Field(default_factory=list)

    @property
    def primary_name(self) -> str | None:
        for name in self.names:
            if name.type == "primary":
                return name.value
        return self.names[0].value if self.names else None

    @property
    def alternate_names(self) -> list[str]:
        return [name.value for name in self.names if name.type == "alternate"]

    def links_of(self, link_type: str) -> list[BggLink]:
        return [link for link in self.links if link.type == link_type]


_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


def parse_thing_response(content: bytes) -> list[BggItem]:
    """Parse a ``/thing`` response; an empty list means the ID is unknown."""

    root = etree.fromstring(content, parser=_PARSER)
    if root.tag == "error" or root.find("error") is not None:
        message = root.findtext(".//message") or "unspecified error"
        raise SourcePayloadError(f"BGG error response: {message.strip()}")
    if root.tag != "items":
        raise SourcePayloadError(f"Unexpected BGG root element <{root.tag}>")
    return [BggItem.model_validate(_item_payload(item)) for item in root.iterfind("item")]


def _item_payload(item: _Element) -> dict[str, object]:
    return {
        "id": item.get("id"),
        "type": item.get("type"),
        "names": [dict(name.attrib) for name in item.iterfind("name")],
        "year_published": _year(item.find("yearpublished")),
        "description": _text(item.findtext("description")),
        "image": _text(item.findtext("image")),
        "thumbnail": _text(item.findtext("thumbnail")),
        "links": [
            {
                "type": link.get("type"),
                "id": link.get("id"),
                "value": link.get("value"),
                "inbound": link.get("inbound") == "true",
            }
            for link in item.iterfind("link")
        ],
    }


def _year(element: _Element | None) -> int | None:
    if element is None:
        return None
    value = (element.get("value") or "").strip()
    if not value.lstrip("-").isdigit() or int(value) <= 0:
        return None
    return int(value)


def _text(value: str | None) -> str | None:
    if value is None:
        return None
    # descriptions arrive double-escaped ("&amp;quot;")
    cleaned = html.unescape(value).strip()
    return cleaned or None
