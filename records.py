"""Pydantic records passed between pipeline stages."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ComponentName = Literal[
    "Header", "Sidebar", "MainContent", "Card", "List", "Button", "Form", "Modal"
]
ArtifactKind = Literal["component", "page"]
Verdict = Literal["passed", "accepted_with_defects", "placeholder"]


class DomNode(BaseModel):
    """One element of the depth-capped structure tree captured by the walker."""

    model_config = ConfigDict(frozen=True)

    tag: str
    id: str | None = None
    classes: list[str] = []
    text: str | None = None
    children: list["DomNode"] = []


class SidebarInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    detected: bool = False
    collapsible: bool = False


class PageSnapshot(BaseModel):
    """Captured state of one crawled page. Never mutated after capture."""

    model_config = ConfigDict(frozen=True)

    index: int
    url: str
    path: str
    title: str
    html: str
    computed_styles: dict[str, dict[str, str]] = {}
    stylesheets: list[str] = []
    structure: DomNode | None = None
    viewport_png: bytes | None = None
    full_png: bytes | None = None
    sidebar: SidebarInfo | None = None

    @property
    def stylesheet_text(self) -> str:
        return "\n".join(self.stylesheets)

    @property
    def screenshot(self) -> bytes | None:
        """Viewport screenshot when present, otherwise the full-page one."""
        return self.viewport_png or self.full_png


class ComponentCandidate(BaseModel):
    """A tagged UI fragment. ``pages`` lists every page it was seen on."""

    model_config = ConfigDict(frozen=True)

    name: ComponentName
    type: str
    selector: str
    html: str = ""
    text: str | None = None
    styles: dict[str, dict[str, str]] = {}
    page_url: str
    page_path: str = ""
    pages: list[str] = []


class DesignTokenSet(BaseModel):
    """Heuristically bucketed style values from one page's stylesheets."""

    model_config = ConfigDict(frozen=True)

    css_variables: dict[str, str] = {}
    colors: list[str] = []
    background_colors: list[str] = []
    text_colors: list[str] = []
    border_colors: list[str] = []
    font_families: list[str] = []
    font_sizes: list[str] = []
    spacing: list[str] = []
    border_radius: list[str] = []
    box_shadows: list[str] = []
    # e.g. {"backgrounds": {"dark": "rgb(46, 46, 48)"}, "accents": {...}}
    buckets: dict[str, dict[str, str]] = {}

    @property
    def is_empty(self) -> bool:
        return not (self.colors or self.font_families or self.spacing or self.css_variables)


class Attempt(BaseModel):
    """One generation attempt; the violations seed the next prompt."""

    model_config = ConfigDict(frozen=True)

    number: int
    source: str
    violations: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.violations


class GeneratedArtifact(BaseModel):
    """One synthesized source file and its validation verdict."""

    name: str
    kind: ArtifactKind
    relative_path: str
    source: str
    verdict: Verdict
    violations: list[str] = []
    attempts: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0

    @property
    def defective(self) -> bool:
        return self.verdict != "passed"


class PageSummary(BaseModel):
    index: int
    url: str
    path: str
    title: str
    screenshots: dict[str, str] = {}
    sidebar: SidebarInfo | None = None


class ComponentSummary(BaseModel):
    name: str
    type: str
    selector: str
    pages: list[str] = []


class ExtractionSummary(BaseModel):
    """Top-level JSON summary written next to the crawl output."""

    pages: list[PageSummary] = []
    components: list[ComponentSummary] = []
    stats: dict[str, int | list[str]] = Field(default_factory=dict)
