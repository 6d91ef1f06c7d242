"""Registry of record kinds and their kind-specific schema hooks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from detail_fetcher import DetailParser, parse_project_detail, parse_publication_detail
from forms import ProjectForm, PublicationForm


@dataclass(frozen=True, slots=True)
class RecordKind:
    """Everything that differs between publications and projects."""

    name: str
    label: str
    parse_detail: DetailParser
    form_type: Callable[..., Any]

    def blank_form(self) -> Any:
        return self.form_type()

    def form_from_detail(self, detail: Any) -> Any:
        return self.form_type.from_detail(detail)


PUBLICATIONS = RecordKind(
    name="publications",
    label="publication",
    parse_detail=parse_publication_detail,
    form_type=PublicationForm,
)

PROJECTS = RecordKind(
    name="projects",
    label="project",
    parse_detail=parse_project_detail,
    form_type=ProjectForm,
)

RECORD_KINDS: dict[str, RecordKind] = {kind.name: kind for kind in (PUBLICATIONS, PROJECTS)}


def get_kind(name: str) -> RecordKind:
    try:
        return RECORD_KINDS[name]
    except KeyError:
        raise ValueError(f"Unknown record kind: {name!r}") from None
