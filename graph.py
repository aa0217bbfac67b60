"""LangGraph pipeline: crawl | load -> extract -> synthesize -> materialize."""

import asyncio
import logging
import time

from langgraph.graph import END, StateGraph

from config import Settings
from generation_client import GenerationClient
from observability.metrics import STAGE_LATENCY
from persistence.snapshot_store import (
    build_summary,
    load_snapshots,
    save_page_tokens,
    save_snapshot,
    save_summary,
)
from state import PipelineState
from stages.materializer import write_project
from stages.style_summarizer import merge_token_sets, summarize
from stages.synthesizer import generate_all
from stages.tagger import extract_components
from stages.walker import crawl_site

logger = logging.getLogger(__name__)


def _instrumented(stage: str, fn):
    """Wrap a node with stage-latency tracking and start/finish logging."""
    async def wrapper(state: PipelineState) -> PipelineState:
        logger.info(f"[{stage}] started")
        start = time.time()
        try:
            return await fn(state)
        finally:
            elapsed = time.time() - start
            STAGE_LATENCY.labels(stage=stage).observe(elapsed)
            logger.info(f"[{stage}] finished in {elapsed:.1f}s")
    return wrapper


def _route_entry(state: PipelineState) -> str:
    """Full runs start with a crawl; regenerate runs reuse the saved crawl output."""
    return "load" if state.get("mode") == "regenerate" else "crawl"


def build_graph(settings: Settings, client: GenerationClient):
    output_dir = settings.output_dir

    async def crawl(state: PipelineState) -> PipelineState:
        snapshots = await crawl_site(settings)
        for snapshot in snapshots:
            save_snapshot(output_dir, snapshot)
        return {**state, "snapshots": snapshots}

    async def load(state: PipelineState) -> PipelineState:
        return {**state, "snapshots": load_snapshots(output_dir)}

    async def extract(state: PipelineState) -> PipelineState:
        snapshots = state["snapshots"]
        components = extract_components(snapshots, max_depth=settings.dom_depth_cap)

        page_tokens = {}
        for snapshot in snapshots:
            tokens = summarize(snapshot.stylesheet_text)
            save_page_tokens(output_dir, snapshot.index, tokens)
            page_tokens[snapshot.index] = tokens
            logger.info(
                f"[extract] page-{snapshot.index}: {len(tokens.colors)} colors, "
                f"{len(tokens.font_families)} font families"
            )
        save_summary(output_dir, build_summary(output_dir, snapshots, components))
        return {
            **state,
            "components": components,
            "page_tokens": page_tokens,
            "design_tokens": merge_token_sets(page_tokens[s.index] for s in snapshots),
        }

    async def synthesize(state: PipelineState) -> PipelineState:
        artifacts = await generate_all(
            state["snapshots"],
            state["components"],
            state["page_tokens"],
            client,
            settings,
        )
        return {
            **state,
            "artifacts": artifacts,
            "total_tokens": sum(a.input_tokens + a.output_tokens for a in artifacts),
            "cost_usd": round(sum(a.cost_usd for a in artifacts), 6),
        }

    async def materialize(state: PipelineState) -> PipelineState:
        snapshots = state["snapshots"]
        # write_project may block on input() in the review gate.
        report = await asyncio.to_thread(
            write_project,
            settings.app_dir,
            state["artifacts"],
            state.get("design_tokens"),
            app_title=snapshots[0].title if snapshots else "Generated App",
            require_review=settings.require_human_review,
        )
        return {**state, "report": report}

    graph = StateGraph(PipelineState)

    graph.add_node("crawl", _instrumented("crawl", crawl))
    graph.add_node("load", _instrumented("load", load))
    graph.add_node("extract", _instrumented("extract", extract))
    graph.add_node("synthesize", _instrumented("synthesize", synthesize))
    graph.add_node("materialize", _instrumented("materialize", materialize))

    graph.set_conditional_entry_point(_route_entry, {"crawl": "crawl", "load": "load"})
    graph.add_edge("crawl", "extract")
    graph.add_edge("load", "extract")
    graph.add_edge("extract", "synthesize")
    graph.add_edge("synthesize", "materialize")
    graph.add_edge("materialize", END)

    return graph.compile()
