"""Project Materializer: writes the generated Vite + React project tree.

Output depends only on the inputs (no timestamps, sorted listings), so
writing the same artifacts twice yields byte-identical files. The component
barrel and the router are built from directory listings, so files left over
from an earlier run are picked up too.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

from records import DesignTokenSet, GeneratedArtifact
from scaffolding import boilerplate
from scaffolding.boilerplate import SOURCE_EXT
from scaffolding.routes import render_app
from security.guardrails import human_review_gate, sandbox_file_path
from stages.checklist import violations_for

logger = logging.getLogger(__name__)

COMPONENTS_DIR = "src/components"
PAGES_DIR = "src/pages"
REPORT_FILE = "VALIDATION_REPORT.md"


@dataclass
class FileVerdict:
    """One line of the validation report."""

    relative_path: str
    verdict: str
    violations: list[str] = field(default_factory=list)
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.verdict == "passed"


def _write(root: Path, relpath: str, text: str) -> Path:
    dest = sandbox_file_path(root, relpath)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_text(text, encoding="utf-8")
    return dest


def list_sources(app_dir: Path, folder: str) -> list[Path]:
    directory = app_dir / folder
    if not directory.is_dir():
        return []
    return sorted(directory.glob(f"*{SOURCE_EXT}"), key=lambda p: p.name)


def render_barrel(component_files: Iterable[Path]) -> str:
    names = sorted({p.stem for p in component_files})
    return "".join(f"export {{ default as {name} }} from './{name}';\n" for name in names)


def render_report(rows: Sequence[FileVerdict], title: str = "Validation Report") -> str:
    rows = sorted(rows, key=lambda r: r.relative_path)
    failed = [r for r in rows if not r.ok]
    lines = [
        f"# {title}",
        "",
        f"**Status:** {'PASSED' if not failed else 'DEFECTS FOUND'}",
        f"**Files:** {len(rows)}  **Passed:** {len(rows) - len(failed)}  **With defects:** {len(failed)}",
        "",
        "| File | Verdict | Attempts | Violations |",
        "|---|---|---|---|",
    ]
    for row in rows:
        violations = "; ".join(row.violations) or "-"
        lines.append(f"| `{row.relative_path}` | {row.verdict} | {row.attempts} | {violations} |")
    return "\n".join(lines) + "\n"


def review_generated_code(artifacts: Sequence[GeneratedArtifact], require_review: bool) -> list[str]:
    """Log risky-pattern warnings; optionally pause for a human before anything is written."""
    warnings = human_review_gate({a.relative_path: a.source for a in artifacts})
    for w in warnings:
        logger.warning(w)
    if warnings and require_review:
        print("\n[security] REQUIRE_HUMAN_REVIEW=true, pausing before write.")
        print(f"  {len(warnings)} warning(s) found. Review above, then press Enter to continue.")
        input("  Press Enter to proceed or Ctrl+C to abort: ")
    return warnings


def write_project(
    app_dir: Path,
    artifacts: Sequence[GeneratedArtifact],
    tokens: DesignTokenSet | None,
    app_title: str,
    require_review: bool = False,
) -> list[FileVerdict]:
    """Write every artifact plus boilerplate under *app_dir*; return the report rows."""
    review_generated_code(artifacts, require_review)
    app_dir.mkdir(parents=True, exist_ok=True)

    # Later artifacts for the same path win.
    by_path = {a.relative_path: a for a in artifacts}
    for relpath, artifact in sorted(by_path.items()):
        _write(app_dir, relpath, artifact.source)
        logger.debug(f"[materializer] wrote {relpath} ({artifact.verdict})")

    components = list_sources(app_dir, COMPONENTS_DIR)
    pages = list_sources(app_dir, PAGES_DIR)

    fixed = {
        "package.json": boilerplate.package_json("generated-app"),
        "tsconfig.json": boilerplate.tsconfig_json(),
        "tsconfig.node.json": boilerplate.tsconfig_node_json(),
        "tailwind.config.js": boilerplate.tailwind_config(tokens),
        "postcss.config.js": boilerplate.POSTCSS_CONFIG,
        "vite.config.ts": boilerplate.VITE_CONFIG,
        "index.html": boilerplate.index_html(app_title),
        "README.md": boilerplate.readme(app_title, [p.stem for p in pages]),
        "src/main.tsx": boilerplate.MAIN_TSX,
        "src/styles/global.css": boilerplate.GLOBAL_CSS,
        "src/components/index.ts": render_barrel(components),
        "src/App.tsx": render_app(p.name for p in pages),
    }
    for relpath, text in fixed.items():
        _write(app_dir, relpath, text)

    rows = [
        FileVerdict(a.relative_path, a.verdict, list(a.violations), a.attempts)
        for a in by_path.values()
    ]
    _write(app_dir, REPORT_FILE, render_report(rows))

    logger.info(
        f"[materializer] {len(by_path)} artifact(s), {len(components)} component file(s), "
        f"{len(pages)} page file(s) written to {app_dir.resolve()}"
    )
    return rows


def validate_project(app_dir: Path) -> list[FileVerdict]:
    """Grade existing files without calling the generation service.

    Pages get the page and layout checklists, components the component one.
    """
    rows: list[FileVerdict] = []
    for folder, kinds in ((COMPONENTS_DIR, ("component",)), (PAGES_DIR, ("page", "layout"))):
        for path in list_sources(app_dir, folder):
            code = path.read_text(encoding="utf-8")
            violations = [v for kind in kinds for v in violations_for(code, kind)]
            rows.append(FileVerdict(
                relative_path=f"{folder}/{path.name}",
                verdict="failed" if violations else "passed",
                violations=violations,
            ))
    return rows
