"""models.py — Shared data types for issuebind."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

PART_KINDS = ("cover", "description", "toc", "section", "article", "final")


@dataclass
class Part:
    kind: str                  # one of PART_KINDS
    ordinal: int               # position in the merged document, strictly increasing
    source: Path | None = None
    pdf_bytes: bytes = b""
    _page_count: int | None = field(default=None, repr=False)

    def __post_init__(self):
        if self.kind not in PART_KINDS:
            raise ValueError(f"Unknown part kind: {self.kind!r}")

    @property
    def page_count(self) -> int | None:
        return self._page_count

    @page_count.setter
    def page_count(self, value: int) -> None:
        if self._page_count is not None:
            raise ValueError(f"page_count of {self.kind} part #{self.ordinal} already set")
        self._page_count = value


@dataclass
class Article:
    title: str
    author: str
    section: str = ""
    source: Path | None = None
    script: str = ""                 # filled in by script_detect.classify
    page_count: int | None = None    # set after rendering
    start_page: int | None = None    # set by the paginator
    pdf_bytes: bytes = b""
    placeholder: bool = False


@dataclass
class Section:
    name: str
    priority: int
    members: list[Article] = field(default_factory=list)


@dataclass
class TocEntry:
    number: int      # 1-based running number across the whole issue
    title: str
    author: str
    section: str
    page: int


@dataclass
class WorkspaceHandle:
    id: str
    created_at: datetime
    root: Path


@dataclass
class RenderResult:
    page_count: int
    pdf_bytes: bytes
    placeholder: bool = False


@dataclass
class AssemblyRequest:
    parts: list[Part]
    sections: list[Section]
    workspace: WorkspaceHandle
    toc_entries: list[TocEntry] = field(default_factory=list)


@dataclass
class IssueSummary:
    name: str
    date: str
    year: int
    month: int
    article_count: int
    articles: list[dict]
    has_cover: bool = True
    has_description: bool = True
    has_final: bool = True
    page_count: int = 0


@dataclass
class AssemblyOutcome:
    """Tagged result of assemble_issue. Exactly one kind per call."""
    kind: str          # "ok", "missing_required_part", "renderer_failure", "merge_chain_exhausted",
                       # "assembly_failure"
    pdf_bytes: bytes = b""
    toc_entries: list[TocEntry] = field(default_factory=list)
    approximate_pagination: bool = False
    summary: IssueSummary | None = None
    missing_parts: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    remediation: str = ""

    @property
    def ok(self) -> bool:
        return self.kind == "ok"
