"""Pure prompt builders: (target, tokens, prior violations) -> instruction text."""

import json
from typing import Sequence

from prompts.component_prompt import COLLAPSIBLE_RULE, COMPONENT_HUMAN, FIXED_RULE, SIDEBAR_HUMAN
from prompts.page_prompt import PAGE_HUMAN
from records import ComponentCandidate, DesignTokenSet, PageSnapshot
from scaling.config import PROMPT_LIMITS
from security.guardrails import sanitize_input
from stages.checklist import item_for

_TAILWIND_PREFIX = {"backgrounds": "bg", "text": "text", "accents": "bg", "borders": "border"}


def tailwind_value(color: str) -> str:
    """`rgb(46, 46, 48)` -> `rgb(46,46,48)`, usable inside bg-[...]."""
    return color.replace(" ", "")


def format_design_tokens(tokens: DesignTokenSet | None) -> str:
    if tokens is None or tokens.is_empty:
        return ""

    lines = ["", "DESIGN TOKENS (extracted from the live stylesheets, use these exact values):"]
    for group, values in tokens.buckets.items():
        prefix = _TAILWIND_PREFIX.get(group, "bg")
        for label, color in values.items():
            lines.append(f"  {group}.{label}: {color}  ->  {prefix}-[{tailwind_value(color)}]")

    def _section(title: str, values: list[str], key: str, sep: str = ", ") -> None:
        if values:
            lines.append(f"{title}: {sep.join(values[:PROMPT_LIMITS[key]])}")

    _section("All colors", tokens.colors, "colors")
    _section("Border colors", tokens.border_colors, "border_colors")
    _section("Font families", tokens.font_families, "font_families", sep=" | ")
    _section("Font sizes", tokens.font_sizes, "font_sizes")
    _section("Spacing (padding/margin)", tokens.spacing, "spacing")
    _section("Border radius", tokens.border_radius, "border_radius")
    _section("Box shadows", tokens.box_shadows, "box_shadows", sep=" ; ")
    if tokens.css_variables:
        variables = list(tokens.css_variables.items())[:PROMPT_LIMITS["colors"]]
        lines.append("CSS variables: " + ", ".join(f"{k}: {v}" for k, v in variables))
    lines.append("Use rgb()/hex arbitrary values for ALL colors. No generic Tailwind palette colors.")
    return "\n".join(lines) + "\n"


def format_corrections(violations: Sequence[str]) -> str:
    """Turn the previous attempt's violations into explicit instructions."""
    if not violations:
        return ""
    lines = ["", "THE PREVIOUS ATTEMPT FAILED VALIDATION. You MUST fix every item below:"]
    for message in violations:
        item = item_for(message)
        fix = f" {item.correction}" if item else ""
        lines.append(f'- You MUST fix "{message}":{fix}')
    return "\n".join(lines) + "\n"


def build_component_prompt(
    candidate: ComponentCandidate,
    tokens: DesignTokenSet | None,
    violations: Sequence[str] = (),
) -> str:
    styles = (
        json.dumps(candidate.styles, indent=2, sort_keys=True)
        if candidate.styles else "No specific styles captured"
    )
    return COMPONENT_HUMAN.format(
        name=candidate.name,
        type=candidate.type,
        selector=candidate.selector,
        pages=", ".join(candidate.pages or [candidate.page_url]),
        html=sanitize_input(candidate.html.rstrip()) or "Structure not captured",
        styles=styles,
        design_tokens=format_design_tokens(tokens),
        corrections=format_corrections(violations),
    )


def build_sidebar_prompt(
    snapshot: PageSnapshot,
    tokens: DesignTokenSet | None,
    violations: Sequence[str] = (),
) -> str:
    collapsible = bool(snapshot.sidebar and snapshot.sidebar.collapsible)
    return SIDEBAR_HUMAN.format(
        title=sanitize_input(snapshot.title),
        url=snapshot.url,
        collapse_rule=COLLAPSIBLE_RULE if collapsible else FIXED_RULE,
        design_tokens=format_design_tokens(tokens),
        corrections=format_corrections(violations),
    )


def build_page_prompt(
    snapshot: PageSnapshot,
    page_name: str,
    components: Sequence[str],
    tokens: DesignTokenSet | None,
    violations: Sequence[str] = (),
) -> str:
    if snapshot.sidebar and snapshot.sidebar.detected:
        layout = "sidebar on the left, header on top, scrolling main content"
    else:
        layout = "header on top, main content below (check the screenshot for a sidebar)"
    return PAGE_HUMAN.format(
        page_name=page_name,
        title=sanitize_input(snapshot.title),
        url=snapshot.url,
        layout=layout,
        components="\n".join(f"- {name}" for name in components) or "- (none)",
        design_tokens=format_design_tokens(tokens),
        corrections=format_corrections(violations),
    )
