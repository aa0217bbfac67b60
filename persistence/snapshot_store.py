"""On-disk crawl output: the unit of truth shared by crawl and regenerate runs.

Layout under the output directory::

    html/page-{i}.html
    css/page-{i}.json                 computed-style dump
    css/page-{i}/stylesheet-{n}.css   captured stylesheet text
    parsed/page-{i}.json              design tokens for the page
    structure/page-{i}.json           DOM tree
    screenshots/page-{i}-viewport.png
    screenshots/page-{i}-full.png
    extraction-results.json           summary of pages and components
"""

import json
import logging
from pathlib import Path

from errors import CrawlError
from records import (
    ComponentCandidate,
    ComponentSummary,
    DesignTokenSet,
    DomNode,
    ExtractionSummary,
    PageSnapshot,
    PageSummary,
)

logger = logging.getLogger(__name__)

SUMMARY_FILE = "extraction-results.json"


def _write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def screenshot_paths(output_dir: Path, index: int) -> dict[str, Path]:
    shots = output_dir / "screenshots"
    return {
        "viewport": shots / f"page-{index}-viewport.png",
        "full": shots / f"page-{index}-full.png",
    }


def save_snapshot(output_dir: Path, snapshot: PageSnapshot) -> None:
    """Persist every captured part of *snapshot* under *output_dir*."""
    i = snapshot.index
    html_path = output_dir / "html" / f"page-{i}.html"
    html_path.parent.mkdir(parents=True, exist_ok=True)
    html_path.write_text(snapshot.html, encoding="utf-8")

    _write_json(output_dir / "css" / f"page-{i}.json", snapshot.computed_styles)

    sheet_dir = output_dir / "css" / f"page-{i}"
    if snapshot.stylesheets:
        sheet_dir.mkdir(parents=True, exist_ok=True)
        for n, text in enumerate(snapshot.stylesheets):
            (sheet_dir / f"stylesheet-{n}.css").write_text(text, encoding="utf-8")

    if snapshot.structure is not None:
        _write_json(output_dir / "structure" / f"page-{i}.json", snapshot.structure.model_dump())

    for kind, path in screenshot_paths(output_dir, i).items():
        data = snapshot.viewport_png if kind == "viewport" else snapshot.full_png
        if data:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

    logger.debug(f"[store] saved page-{i} ({snapshot.path}) to {output_dir}")


def save_page_tokens(output_dir: Path, index: int, tokens: DesignTokenSet) -> None:
    _write_json(output_dir / "parsed" / f"page-{index}.json", tokens.model_dump())


def build_summary(
    output_dir: Path,
    snapshots: list[PageSnapshot],
    components: list[ComponentCandidate],
) -> ExtractionSummary:
    pages = [
        PageSummary(
            index=s.index,
            url=s.url,
            path=s.path,
            title=s.title,
            screenshots={
                kind: str(path.relative_to(output_dir))
                for kind, path in screenshot_paths(output_dir, s.index).items()
            },
            sidebar=s.sidebar,
        )
        for s in snapshots
    ]
    return ExtractionSummary(
        pages=pages,
        components=[
            ComponentSummary(name=c.name, type=c.type, selector=c.selector, pages=list(c.pages))
            for c in components
        ],
        stats={
            "total_pages": len(pages),
            "total_components": len(components),
            "component_types": sorted({c.type for c in components}),
        },
    )


def save_summary(output_dir: Path, summary: ExtractionSummary) -> Path:
    path = output_dir / SUMMARY_FILE
    _write_json(path, summary.model_dump())
    logger.info(f"[store] extraction summary written to {path}")
    return path


def load_summary(output_dir: Path) -> ExtractionSummary:
    path = output_dir / SUMMARY_FILE
    if not path.exists():
        raise CrawlError(
            f"No crawl output at {path}. Run the full pipeline first."
        )
    return ExtractionSummary.model_validate_json(path.read_text(encoding="utf-8"))


def load_page_tokens(output_dir: Path, index: int) -> DesignTokenSet | None:
    path = output_dir / "parsed" / f"page-{index}.json"
    if not path.exists():
        return None
    return DesignTokenSet.model_validate_json(path.read_text(encoding="utf-8"))


def _stylesheet_number(path: Path) -> int:
    return int(path.stem.rsplit("-", 1)[-1])


def load_snapshot(output_dir: Path, page: PageSummary) -> PageSnapshot:
    """Rebuild one PageSnapshot from the files written by save_snapshot."""
    i = page.index
    html_path = output_dir / "html" / f"page-{i}.html"
    css_path = output_dir / "css" / f"page-{i}.json"
    structure_path = output_dir / "structure" / f"page-{i}.json"
    sheet_dir = output_dir / "css" / f"page-{i}"

    stylesheets: list[str] = []
    if sheet_dir.is_dir():
        sheets = sorted(sheet_dir.glob("stylesheet-*.css"), key=_stylesheet_number)
        stylesheets = [p.read_text(encoding="utf-8") for p in sheets]

    shots = screenshot_paths(output_dir, i)
    return PageSnapshot(
        index=i,
        url=page.url,
        path=page.path,
        title=page.title,
        html=html_path.read_text(encoding="utf-8") if html_path.exists() else "",
        computed_styles=json.loads(css_path.read_text(encoding="utf-8")) if css_path.exists() else {},
        stylesheets=stylesheets,
        structure=(
            DomNode.model_validate_json(structure_path.read_text(encoding="utf-8"))
            if structure_path.exists() else None
        ),
        viewport_png=shots["viewport"].read_bytes() if shots["viewport"].exists() else None,
        full_png=shots["full"].read_bytes() if shots["full"].exists() else None,
        sidebar=page.sidebar,
    )


def load_snapshots(output_dir: Path) -> list[PageSnapshot]:
    """Every page listed in the saved summary, in crawl order.

    Raises CrawlError when no prior crawl output exists.
    """
    summary = load_summary(output_dir)
    snapshots = [load_snapshot(output_dir, page) for page in sorted(summary.pages, key=lambda p: p.index)]
    if not snapshots:
        raise CrawlError(f"Crawl output at {output_dir} lists no pages")
    logger.info(f"[store] loaded {len(snapshots)} page snapshot(s) from {output_dir}")
    return snapshots
