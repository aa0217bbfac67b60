"""Code Synthesizer: bounded generate -> isolate -> checklist -> retry loop.

Every target ends as exactly one GeneratedArtifact:

* ``passed`` when an attempt clears the checklist,
* ``accepted_with_defects`` when the attempt ceiling is reached first (the
  last text is kept together with its outstanding violations),
* ``placeholder`` when the generation service fails; transport errors are
  never retried.
"""

import base64
import logging
import re
from dataclasses import dataclass
from functools import partial
from pathlib import PurePosixPath
from typing import Callable, Sequence

from config import Settings
from errors import TransportError
from generation_client import Completion, GenerationClient, GenerationRequest
from observability.metrics import ARTIFACTS, CHECKLIST_VIOLATIONS, GENERATION_ATTEMPTS
from prompts.builder import build_component_prompt, build_page_prompt, build_sidebar_prompt
from prompts.component_prompt import COMPONENT_SYSTEM
from prompts.page_prompt import PAGE_SYSTEM
from records import (
    ArtifactKind,
    Attempt,
    ComponentCandidate,
    DesignTokenSet,
    GeneratedArtifact,
    PageSnapshot,
)
from scaffolding.boilerplate import SOURCE_EXT
from scaffolding.placeholders import (
    BUTTON_COMPONENT,
    HEADER_COMPONENT,
    SIDEBAR_COMPONENT,
    TASK_DETAIL_PAGE,
    placeholder_component,
    placeholder_page,
)
from scaling.config import MAX_IMAGE_BASE64_KB
from scaling.rate_limiter import batch_generate
from stages.checklist import item_for, violations_for

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```[\w+-]*[ \t]*\n(.*?)(?:\n```|\Z)", re.DOTALL)
_EXPORT_DEFAULT = re.compile(r"^export\s+default\s+[\w$.]+\s*;?\s*$", re.MULTILINE)


# ── Response cleanup ─────────────────────────────────────────────────────────

def strip_code_fence(text: str) -> str:
    """Body of the first Markdown code fence, or the stripped text when there is none."""
    match = _FENCE.search(text)
    if match is None:
        return text.strip()
    return match.group(1).strip()


def isolate_source(text: str) -> str:
    """Source code from a model reply: no fences, nothing after the last default export."""
    code = strip_code_fence(text)
    exports = list(_EXPORT_DEFAULT.finditer(code))
    if exports:
        code = code[: exports[-1].end()]
    return code.strip() + "\n"


def looks_like_source(code: str) -> bool:
    return "import" in code or "export" in code


def encoded_size_kb(png: bytes) -> int:
    return len(base64.b64encode(png)) // 1024


def image_fits(png: bytes) -> bool:
    """True when the base64 form of *png* is within the attachment limit."""
    return encoded_size_kb(png) <= MAX_IMAGE_BASE64_KB


# ── Targets ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SynthesisTarget:
    """Everything the loop needs to produce one file."""

    name: str
    kind: ArtifactKind
    system_prompt: str
    build_prompt: Callable[[Sequence[str]], str]
    fallback: Callable[[], str]
    screenshot: bytes | None = None

    @property
    def relative_path(self) -> str:
        return artifact_path(self.name, self.kind)


def artifact_path(name: str, kind: ArtifactKind) -> str:
    folder = "components" if kind == "component" else "pages"
    return str(PurePosixPath("src") / folder / f"{name}{SOURCE_EXT}")


def component_target(
    candidate: ComponentCandidate,
    tokens: DesignTokenSet | None,
    screenshot: bytes | None = None,
) -> SynthesisTarget:
    return SynthesisTarget(
        name=candidate.name,
        kind="component",
        system_prompt=COMPONENT_SYSTEM,
        build_prompt=partial(build_component_prompt, candidate, tokens),
        fallback=partial(placeholder_component, candidate.name, candidate.type),
        screenshot=screenshot,
    )


def sidebar_target(snapshot: PageSnapshot, tokens: DesignTokenSet | None) -> SynthesisTarget:
    return SynthesisTarget(
        name="Sidebar",
        kind="component",
        system_prompt=COMPONENT_SYSTEM,
        build_prompt=partial(build_sidebar_prompt, snapshot, tokens),
        fallback=lambda: SIDEBAR_COMPONENT,
        screenshot=snapshot.screenshot,
    )


def page_target(
    snapshot: PageSnapshot,
    page_name: str,
    components: Sequence[str],
    tokens: DesignTokenSet | None,
) -> SynthesisTarget:
    return SynthesisTarget(
        name=page_name,
        kind="page",
        system_prompt=PAGE_SYSTEM,
        build_prompt=partial(build_page_prompt, snapshot, page_name, list(components), tokens),
        fallback=partial(placeholder_page, page_name, snapshot.title, list(components)),
        screenshot=snapshot.screenshot,
    )


def static_artifact(name: str, kind: ArtifactKind, source: str) -> GeneratedArtifact:
    """An artifact written from a fixed template, still graded by its checklist."""
    violations = violations_for(source, kind)
    verdict = "accepted_with_defects" if violations else "passed"
    ARTIFACTS.labels(kind=kind, verdict=verdict).inc()
    return GeneratedArtifact(
        name=name,
        kind=kind,
        relative_path=artifact_path(name, kind),
        source=source,
        verdict=verdict,
        violations=violations,
    )


# ── The loop ─────────────────────────────────────────────────────────────────

def _placeholder(target: SynthesisTarget, attempts: int, reason: str) -> GeneratedArtifact:
    logger.error(f"[synthesizer] {target.name}: {reason}; writing placeholder")
    ARTIFACTS.labels(kind=target.kind, verdict="placeholder").inc()
    source = target.fallback()
    return GeneratedArtifact(
        name=target.name,
        kind=target.kind,
        relative_path=target.relative_path,
        source=source,
        verdict="placeholder",
        violations=violations_for(source, target.kind),
        attempts=attempts,
    )


async def synthesize(
    target: SynthesisTarget,
    client: GenerationClient,
    settings: Settings,
) -> GeneratedArtifact:
    """Run the bounded loop for one target.

    At most ``settings.max_attempts`` checklist-graded attempts are made. One
    extra text-only request is allowed per target when a reply to a
    screenshot-carrying request contains no code at all.
    """
    image = target.screenshot if settings.attach_screenshots else None
    if image is not None and not image_fits(image):
        logger.warning(
            f"[synthesizer] {target.name}: screenshot is {encoded_size_kb(image)} KB base64, sending text only"
        )
        image = None

    history: list[Attempt] = []
    completions: list[Completion] = []
    reasked = False

    for number in range(1, settings.max_attempts + 1):
        previous = history[-1].violations if history else ()
        temperature = settings.llm_temperature if number == 1 else settings.llm_retry_temperature
        request = GenerationRequest(
            artifact=target.name,
            kind=target.kind,
            system_prompt=target.system_prompt,
            prompt=target.build_prompt(previous),
            temperature=temperature,
            image_png=image,
        )
        GENERATION_ATTEMPTS.labels(kind=target.kind).inc()
        try:
            completion = await client.complete(request)
            completions.append(completion)
            source = isolate_source(completion.text)
            if image is not None and not looks_like_source(source) and not reasked:
                logger.warning(f"[synthesizer] {target.name}: no code in reply, retrying without the image")
                reasked = True
                image = None
                completion = await client.complete(
                    GenerationRequest(
                        artifact=request.artifact,
                        kind=request.kind,
                        system_prompt=request.system_prompt,
                        prompt=request.prompt,
                        temperature=request.temperature,
                    )
                )
                completions.append(completion)
                source = isolate_source(completion.text)
        except TransportError as exc:
            return _with_usage(_placeholder(target, number, str(exc)), completions)

        attempt = Attempt(
            number=number,
            source=source,
            violations=tuple(violations_for(source, target.kind)),
        )
        history.append(attempt)
        for message in attempt.violations:
            item = item_for(message)
            CHECKLIST_VIOLATIONS.labels(item=item.key if item else message).inc()

        if attempt.passed:
            logger.info(f"[synthesizer] {target.relative_path} passed on attempt {number}")
            break
        logger.warning(
            f"[synthesizer] {target.name} attempt {number}/{settings.max_attempts} failed: "
            f"{', '.join(attempt.violations)}"
        )

    final = history[-1]
    verdict = "passed" if final.passed else "accepted_with_defects"
    if not final.passed:
        logger.warning(f"[synthesizer] Max attempts reached for {target.name}. Keeping last output with defects.")
    ARTIFACTS.labels(kind=target.kind, verdict=verdict).inc()
    artifact = GeneratedArtifact(
        name=target.name,
        kind=target.kind,
        relative_path=target.relative_path,
        source=final.source,
        verdict=verdict,
        violations=list(final.violations),
        attempts=final.number,
    )
    return _with_usage(artifact, completions)


def _with_usage(artifact: GeneratedArtifact, completions: list[Completion]) -> GeneratedArtifact:
    artifact.input_tokens = sum(c.input_tokens for c in completions)
    artifact.output_tokens = sum(c.output_tokens for c in completions)
    artifact.cost_usd = round(sum(c.cost_usd for c in completions), 6)
    return artifact


# ── Whole-app generation ─────────────────────────────────────────────────────

def page_filename(path: str, title: str = "") -> str:
    """Page component name for a crawled path, e.g. ``/app/home`` -> ``HomePage``."""
    if not path:
        return "HomePage"
    if "/home" in path:
        return "HomePage"
    if "/project" in path:
        return "TasksPage" if "my tasks" in title.lower() else "ProjectsPage"
    if "/tasks" in path or "/my_tasks" in path:
        return "TasksPage"
    segments = [s for s in path.split("/") if s and not s.isdigit()]
    if not segments:
        return "HomePage"
    words = re.split(r"[^A-Za-z0-9]+", segments[-1])
    stem = "".join(w.capitalize() for w in words if w)
    return f"{stem or 'Home'}Page"


def ensure_base_components(
    candidates: Sequence[ComponentCandidate],
    snapshots: Sequence[PageSnapshot],
    tokens: DesignTokenSet | None,
) -> tuple[list[SynthesisTarget], list[GeneratedArtifact]]:
    """Targets and static artifacts for the layout pieces every page imports.

    A Sidebar is generated from the first page's screenshot when none was
    tagged; Header and Button fall back to fixed templates.
    """
    types = {c.type for c in candidates}
    targets: list[SynthesisTarget] = []
    static: list[GeneratedArtifact] = []

    if "sidebar" not in types:
        first = snapshots[0] if snapshots else None
        if first is not None and first.screenshot:
            logger.info("[synthesizer] No sidebar tagged, generating one from the first screenshot")
            targets.append(sidebar_target(first, tokens))
        else:
            static.append(static_artifact("Sidebar", "component", SIDEBAR_COMPONENT))
    if "header" not in types:
        static.append(static_artifact("Header", "component", HEADER_COMPONENT))
    if "button" not in types:
        static.append(static_artifact("Button", "component", BUTTON_COMPONENT))
    return targets, static


async def generate_all(
    snapshots: Sequence[PageSnapshot],
    candidates: Sequence[ComponentCandidate],
    tokens_by_index: dict[int, DesignTokenSet],
    client: GenerationClient,
    settings: Settings,
) -> list[GeneratedArtifact]:
    """Components first (pages import them), then one page per distinct page name."""
    by_url = {s.url: s for s in snapshots}
    first_tokens = tokens_by_index.get(snapshots[0].index) if snapshots else None

    def _tokens_for(url: str) -> DesignTokenSet | None:
        snapshot = by_url.get(url)
        return tokens_by_index.get(snapshot.index) if snapshot else first_tokens

    base_targets, static = ensure_base_components(candidates, snapshots, first_tokens)
    component_targets = base_targets + [
        component_target(
            c,
            _tokens_for(c.page_url),
            by_url[c.page_url].screenshot if c.page_url in by_url else None,
        )
        for c in candidates
    ]
    run = partial(synthesize, client=client, settings=settings)

    logger.info(f"[synthesizer] Generating {len(component_targets)} component(s)")
    components = await batch_generate(component_targets, run, settings.batch_size, settings.batch_delay)
    components += static
    component_names = sorted({a.name for a in components})

    page_targets: list[SynthesisTarget] = []
    seen: set[str] = set()
    for snapshot in snapshots:
        name = page_filename(snapshot.path, snapshot.title)
        if name in seen:
            logger.warning(f"[synthesizer] {snapshot.path} also maps to {name}, skipping")
            continue
        seen.add(name)
        page_targets.append(page_target(snapshot, name, component_names, tokens_by_index.get(snapshot.index)))

    logger.info(f"[synthesizer] Generating {len(page_targets)} page(s)")
    pages = await batch_generate(page_targets, run, settings.batch_size, settings.batch_delay)

    if "TasksPage" in seen and "TaskDetailPage" not in seen:
        pages.append(static_artifact("TaskDetailPage", "page", TASK_DETAIL_PAGE))

    return components + pages
