"""Relations between catalog entries."""

from __future__ import annotations

from dataclasses import dataclass

from meeplesync.domain.model.enums import RelationKind


@dataclass(frozen=True, slots=True)
class SequelRelation:
    """``subject`` follows or precedes ``object``; both keyed by primary-catalog ID."""

    subject_bgg_id: int
    kind: RelationKind
    object_bgg_id: int
    object_label: str | None = None

    def inverse(self, subject_label: str | None = None) -> SequelRelation:
        kind = RelationKind.PRECEDES if self.kind is RelationKind.FOLLOWS else RelationKind.FOLLOWS
        return SequelRelation(
            subject_bgg_id=self.object_bgg_id,
            kind=kind,
            object_bgg_id=self.subject_bgg_id,
            object_label=subject_label,
        )


@dataclass(frozen=True, slots=True)
class SeriesMembership:
    series_id: str
    series_label: str | None = None
