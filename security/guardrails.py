"""Guardrails around untrusted text: crawled page content going into prompts and
generated source going onto disk."""

import re
from pathlib import Path

# ── Layer 1: Prompt input sanitization ───────────────────────────────────────
# Crawled titles and HTML snippets are third-party text pasted into prompts.

_INJECTION_PATTERNS = [
    re.compile(r"ignore\s+(all\s+)?previous\s+instructions", re.IGNORECASE),
    re.compile(r"system\s*:", re.IGNORECASE),
    re.compile(r"<\|im_start\|>", re.IGNORECASE),
    re.compile(r"<\|im_end\|>", re.IGNORECASE),
    re.compile(r"<\|endoftext\|>", re.IGNORECASE),
    re.compile(r"```\s*system", re.IGNORECASE),
]


def sanitize_input(text: str) -> str:
    """Strip known prompt-injection patterns from crawled text."""
    sanitized = text
    for pattern in _INJECTION_PATTERNS:
        sanitized = pattern.sub("[REDACTED]", sanitized)
    return sanitized


# ── Layer 2: Path sandboxing ─────────────────────────────────────────────────

def sandbox_file_path(root: Path, filepath: str) -> Path:
    """Resolve *filepath* under *root* and assert it stays there.

    Raises ValueError on path-traversal attempts.
    """
    base = root.resolve()
    resolved = (base / filepath).resolve()
    if resolved != base and base not in resolved.parents:
        raise ValueError(
            f"Path traversal blocked: {filepath!r} resolves outside {root}"
        )
    return resolved


# ── Layer 3: Human-review gate ───────────────────────────────────────────────

_RISKY_PATTERNS = [
    re.compile(r"dangerouslySetInnerHTML"),
    re.compile(r"\beval\s*\("),
    re.compile(r"\bnew\s+Function\s*\("),
    re.compile(r"\bdocument\.write\s*\("),
]


def human_review_gate(code_artifacts: dict[str, str]) -> list[str]:
    """Scan generated code for risky patterns.

    Returns a list of warnings. With REQUIRE_HUMAN_REVIEW=true, callers pause
    and display these before writing artifacts.
    """
    warnings: list[str] = []
    for filename, code in sorted(code_artifacts.items()):
        for pattern in _RISKY_PATTERNS:
            if pattern.search(code):
                warnings.append(
                    f"[security] Risky pattern {pattern.pattern!r} found in {filename}"
                )
    return warnings
