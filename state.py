"""Shared pipeline state flowing through the LangGraph graph."""

from typing import TypedDict

from records import ComponentCandidate, DesignTokenSet, GeneratedArtifact, PageSnapshot
from stages.materializer import FileVerdict


class PipelineState(TypedDict, total=False):
    # Run identity
    run_id: str  # unique per run
    mode: str  # "run" | "regenerate"
    # Walker / snapshot store outputs
    snapshots: list[PageSnapshot]
    # Extraction outputs
    components: list[ComponentCandidate]
    page_tokens: dict[int, DesignTokenSet]  # page index -> tokens
    design_tokens: DesignTokenSet  # merged across pages, feeds tailwind.config.js
    # Synthesizer outputs
    artifacts: list[GeneratedArtifact]
    # Materializer outputs
    report: list[FileVerdict]
    # Cost tracking
    total_tokens: int
    cost_usd: float
