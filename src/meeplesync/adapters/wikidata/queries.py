"""SPARQL queries against the Wikidata query service.

Properties used: P31/P279 instance of board game (Q131436), P2339 BoardGameGeek ID,
P571 inception, P18 image, P856 official website, P953 full work (rulebook), P179 part of
the series, P155 follows, P156 followed by. The English Wikipedia article comes from the
``schema:about`` sitelink. ``wdno:`` marks an explicit "no value" statement for a property.
"""

from __future__ import annotations

from string import Template
from typing import Final

_SELECT: Final = """
SELECT ?game ?gameLabel ?gameDescription ?inceptionYear ?bggId ?image ?website ?rulebook
       ?noWebsite ?noRulebook ?series ?seriesLabel
       ?follows ?followsLabel ?followsBggId
       ?followedBy ?followedByLabel ?followedByBggId
       ?wikipediaArticle
WHERE {
"""

_OPTIONALS: Final = """
  OPTIONAL { ?game wdt:P571 ?inception . BIND(YEAR(?inception) AS ?inceptionYear) }
  OPTIONAL { ?game wdt:P18 ?image . }
  OPTIONAL { ?game wdt:P856 ?website . }
  OPTIONAL { ?game wdt:P953 ?rulebook . }
  OPTIONAL { ?game a wdno:P856 . BIND("true" AS ?noWebsite) }
  OPTIONAL { ?game a wdno:P953 . BIND("true" AS ?noRulebook) }
  OPTIONAL { ?game wdt:P179 ?series . }
  OPTIONAL {
    ?game wdt:P155 ?follows .
    OPTIONAL { ?follows wdt:P2339 ?followsBggId . }
  }
  OPTIONAL {
    ?game wdt:P156 ?followedBy .
    OPTIONAL { ?followedBy wdt:P2339 ?followedByBggId . }
  }
  OPTIONAL {
    ?wikipediaArticle schema:about ?game ;
                      schema:isPartOf <https://en.wikipedia.org/> .
  }
  SERVICE wikibase:label { bd:serviceParam wikibase:language "[AUTO_LANGUAGE],en". }
}
LIMIT $LIMIT
"""

GAME_BY_BGG_ID: Final = Template(
    _SELECT
    + """
  ?game wdt:P31/wdt:P279* wd:Q131436 .
  ?game wdt:P2339 "$BGG_ID" .
  BIND("$BGG_ID" AS ?bggId)
"""
    + _OPTIONALS
)

GAME_BY_LABEL: Final = Template(
    _SELECT
    + """
  ?game wdt:P31/wdt:P279* wd:Q131436 .
  ?game rdfs:label ?label .
  FILTER(LANG(?label) = "en")
  FILTER(LCASE(STR(?label)) = LCASE("$GAME_NAME"))
  OPTIONAL { ?game wdt:P2339 ?bggId . }
"""
    + _OPTIONALS
)

# Sequels and series multiply rows; this bounds the fan-out of a single item.
ROW_LIMIT: Final = 200


def game_by_bgg_id(bgg_id: int) -> str:
    return GAME_BY_BGG_ID.substitute(BGG_ID=int(bgg_id), LIMIT=ROW_LIMIT)


def game_by_label(name: str) -> str:
    return GAME_BY_LABEL.substitute(GAME_NAME=escape_literal(name), LIMIT=ROW_LIMIT)


def escape_literal(value: str) -> str:
    """Escape a value for use inside a double-quoted SPARQL string literal."""

    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
