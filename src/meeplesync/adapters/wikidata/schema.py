"""SPARQL JSON result models (application/sparql-results+json)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SparqlModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SparqlTerm(SparqlModel):
    type: str
    value: str
    lang: str | None = Field(default=None, alias="xml:lang")
    datatype: str | None = None


class SparqlHead(SparqlModel):
    vars: list[str] = Field(default_factory=list)


class SparqlBindings(SparqlModel):
    bindings: list[dict[str, SparqlTerm]] = Field(default_factory=list)


class SparqlResponse(SparqlModel):
    head: SparqlHead = Field(default_factory=SparqlHead)
    results: SparqlBindings

    def rows(self) -> list[dict[str, str]]:
        return [{name: term.value for name, term in row.items()} for row in self.results.bindings]
