from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import DEFAULT_SECTION


@dataclass(frozen=True)
class ClassKey:
    """Identity of a class offering: cohort, year, term and section.

    Instances built by `normalizer.normalize` hold canonical components
    (e.g. "2022-2026", "3rd Year", "Sem 5", "B"); `key` is then the
    canonical string form used everywhere a class is stored or compared.
    """

    cohort: str
    year: str
    term: str
    section: str = DEFAULT_SECTION

    @property
    def key(self) -> str:
        return "_".join((self.cohort, self.year, self.term, self.section))

    def as_dict(self) -> dict:
        return {"cohort": self.cohort, "year": self.year, "term": self.term, "section": self.section}

    def __str__(self) -> str:
        return self.key
