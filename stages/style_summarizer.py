"""Style Summarizer: regex passes over stylesheet text, bucketed into design tokens.

Independent regular expressions, not a CSS parser. Buckets are picked by raw
frequency with a luma threshold for dark/light and a max-min ratio for
"vibrant"; the labels are approximate prompt material, nothing more.
"""

import colorsys
import logging
import re
from collections import Counter
from typing import Iterable

from records import DesignTokenSet

logger = logging.getLogger(__name__)

_COLOR = r"(#[0-9a-fA-F]{3,8}|rgba?\([^)]+\)|hsla?\([^)]+\))"

CSS_VAR_RE = re.compile(r"--([\w-]+):\s*([^;]+);")
BACKGROUND_RE = re.compile(r"background-color:\s*" + _COLOR + ";")
TEXT_COLOR_RE = re.compile(r"(?:^|[^-])color:\s*" + _COLOR + ";", re.MULTILINE)
BORDER_COLOR_RE = re.compile(r"border(?:-(?:top|right|bottom|left))?-color:\s*" + _COLOR + ";")
ANY_COLOR_RE = re.compile(_COLOR)
FONT_FAMILY_RE = re.compile(r"font-family:\s*([^;]+);", re.IGNORECASE)
FONT_SIZE_RE = re.compile(r"font-size:\s*([^;]+);", re.IGNORECASE)
SPACING_RE = re.compile(r"(?:padding|margin)(?:-(?:top|right|bottom|left))?:\s*([^;]+);", re.IGNORECASE)
RADIUS_RE = re.compile(r"border-radius:\s*([^;]+);", re.IGNORECASE)
SHADOW_RE = re.compile(r"box-shadow:\s*([^;]+);", re.IGNORECASE)

_PX_OR_REM = re.compile(r"^\d+(?:px|rem)$")
_RGB = re.compile(r"rgba?\((\d+),\s*(\d+),\s*(\d+)")
_TRANSPARENT = "rgba(0, 0, 0, 0)"
_COMMON = {_TRANSPARENT, "#000", "#fff"}

DARK_LUMA = 128
VIBRANT_RATIO = 0.3


# ── Extractors ───────────────────────────────────────────────────────────────
# Each returns every occurrence in source order; duplicates carry frequency.

def extract_css_variables(css: str) -> dict[str, str]:
    return {f"--{name}": value.strip() for name, value in CSS_VAR_RE.findall(css)}


def _declared_colors(pattern: re.Pattern, css: str) -> list[str]:
    return [c for c in pattern.findall(css) if c != _TRANSPARENT and "inherit" not in c]


def extract_background_colors(css: str) -> list[str]:
    return _declared_colors(BACKGROUND_RE, css)


def extract_text_colors(css: str) -> list[str]:
    return _declared_colors(TEXT_COLOR_RE, css)


def extract_border_colors(css: str) -> list[str]:
    return _declared_colors(BORDER_COLOR_RE, css)


def extract_colors(css: str) -> list[str]:
    """Catch-all: every color literal anywhere, minus transparent/black/white shorthands."""
    return [c for c in ANY_COLOR_RE.findall(css) if c not in _COMMON]


def extract_font_families(css: str) -> list[str]:
    families = [f.strip() for f in FONT_FAMILY_RE.findall(css)]
    return [f for f in families if "inherit" not in f and "monospace, monospace" not in f]


def extract_font_sizes(css: str) -> list[str]:
    return [s.strip() for s in FONT_SIZE_RE.findall(css) if _PX_OR_REM.match(s.strip())]


def extract_spacing(css: str) -> list[str]:
    return [s.strip() for s in SPACING_RE.findall(css) if _PX_OR_REM.match(s.strip())]


def extract_border_radius(css: str) -> list[str]:
    return [r.strip() for r in RADIUS_RE.findall(css)]


def extract_box_shadows(css: str) -> list[str]:
    return [s.strip() for s in SHADOW_RE.findall(css) if s.strip() != "none"]


# ── Color heuristics ─────────────────────────────────────────────────────────

def parse_color(color: str) -> tuple[int, int, int] | None:
    """RGB triple for hex (3/6/8 digits) or rgb()/rgba() literals; None otherwise."""
    m = _RGB.match(color)
    if m:
        return int(m.group(1)), int(m.group(2)), int(m.group(3))
    if color.startswith("#"):
        digits = color[1:]
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits[:3])
        if len(digits) >= 6:
            try:
                return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
            except ValueError:
                return None
    return None


def luma(rgb: tuple[int, int, int]) -> float:
    r, g, b = rgb
    return 0.299 * r + 0.587 * g + 0.114 * b


def is_dark(color: str) -> bool:
    rgb = parse_color(color)
    return rgb is not None and luma(rgb) < DARK_LUMA


def is_vibrant(color: str) -> bool:
    rgb = parse_color(color)
    if rgb is None:
        return False
    hi, lo = max(rgb), min(rgb)
    return hi > 0 and (hi - lo) / hi > VIBRANT_RATIO


def is_yellow(color: str) -> bool:
    rgb = parse_color(color)
    if rgb is None:
        return False
    hue, _, _ = colorsys.rgb_to_hsv(*(v / 255 for v in rgb))
    return 35 <= hue * 360 <= 65


def ranked(values: Iterable[str]) -> list[str]:
    """Distinct values, most frequent first; ties broken by value so input order never matters."""
    counts = Counter(values)
    return [v for v, _ in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]


def most_frequent(values: Iterable[str]) -> str | None:
    top = ranked(values)
    return top[0] if top else None


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


# ── Bucketing ────────────────────────────────────────────────────────────────

def _pair(values: list[str], first: str, second: str) -> dict[str, str]:
    top = ranked(values)
    if not top:
        return {}
    return {first: top[0], second: top[1] if len(top) > 1 else top[0]}


def bucket_colors(
    backgrounds: list[str],
    texts: list[str],
    borders: list[str],
    colors: list[str],
) -> dict[str, dict[str, str]]:
    buckets: dict[str, dict[str, str]] = {"backgrounds": {}, "text": {}, "accents": {}, "borders": {}}

    buckets["backgrounds"].update(_pair([c for c in backgrounds if is_dark(c)], "dark", "dark-alt"))
    buckets["backgrounds"].update(_pair([c for c in backgrounds if not is_dark(c)], "light", "light-alt"))

    buckets["text"].update(_pair([c for c in texts if is_dark(c)], "primary", "secondary"))
    light_text = most_frequent(c for c in texts if not is_dark(c))
    if light_text:
        buckets["text"]["light"] = light_text

    vibrant = [c for c in colors if is_vibrant(c)]
    for label, color in zip(("primary", "secondary", "tertiary"), ranked(c for c in vibrant if not is_yellow(c))):
        buckets["accents"][label] = color
    warning = most_frequent(c for c in vibrant if is_yellow(c))
    if warning:
        buckets["accents"]["warning"] = warning

    border = most_frequent(borders)
    if border:
        buckets["borders"]["default"] = border

    return {group: values for group, values in buckets.items() if values}


def summarize(css_text: str) -> DesignTokenSet:
    """One pass of every extractor over *css_text*, then frequency bucketing."""
    backgrounds = extract_background_colors(css_text)
    texts = extract_text_colors(css_text)
    borders = extract_border_colors(css_text)
    colors = backgrounds + texts + borders + extract_colors(css_text)

    return DesignTokenSet(
        css_variables=extract_css_variables(css_text),
        colors=ranked(colors),
        background_colors=ranked(backgrounds),
        text_colors=ranked(texts),
        border_colors=ranked(borders),
        font_families=ranked(extract_font_families(css_text)),
        font_sizes=ranked(extract_font_sizes(css_text)),
        spacing=ranked(extract_spacing(css_text)),
        border_radius=ranked(extract_border_radius(css_text)),
        box_shadows=ranked(extract_box_shadows(css_text)),
        buckets=bucket_colors(backgrounds, texts, borders, colors),
    )


def merge_token_sets(token_sets: Iterable[DesignTokenSet]) -> DesignTokenSet:
    """Union of several page token sets; the first page to fill a bucket label keeps it."""
    sets = list(token_sets)
    if not sets:
        return DesignTokenSet()

    css_variables: dict[str, str] = {}
    buckets: dict[str, dict[str, str]] = {}
    for tokens in sets:
        for name, value in tokens.css_variables.items():
            css_variables.setdefault(name, value)
        for group, values in tokens.buckets.items():
            target = buckets.setdefault(group, {})
            for label, color in values.items():
                target.setdefault(label, color)

    def _merged(field: str) -> list[str]:
        return _unique(v for tokens in sets for v in getattr(tokens, field))

    merged = DesignTokenSet(
        css_variables=css_variables,
        colors=_merged("colors"),
        background_colors=_merged("background_colors"),
        text_colors=_merged("text_colors"),
        border_colors=_merged("border_colors"),
        font_families=_merged("font_families"),
        font_sizes=_merged("font_sizes"),
        spacing=_merged("spacing"),
        border_radius=_merged("border_radius"),
        box_shadows=_merged("box_shadows"),
        buckets=buckets,
    )
    logger.debug(f"[style] merged {len(sets)} token set(s): {len(merged.colors)} colors")
    return merged
