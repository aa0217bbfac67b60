"""LLM-level tracing via Langfuse. Gracefully degrades if not configured."""

import logging
import os
import time

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langfuse import Langfuse

from scaling.config import calculate_cost

logger = logging.getLogger(__name__)


def build_langfuse() -> Langfuse | None:
    """Return a Langfuse client when LANGFUSE_PUBLIC_KEY is set, else None."""
    if not os.getenv("LANGFUSE_PUBLIC_KEY"):
        logger.info("[langfuse] No API key found, tracing disabled")
        return None
    logger.info("[langfuse] Tracing enabled")
    return Langfuse()


def _usage(response) -> tuple[int, int]:
    usage = getattr(response, "usage_metadata", None) or {}
    return usage.get("input_tokens", 0), usage.get("output_tokens", 0)


async def traced_call(
    llm: BaseChatModel,
    messages: list[BaseMessage],
    artifact: str,
    model_used: str,
    prompt_text: str,
    langfuse: Langfuse | None = None,
    run_id: str = "",
):
    """Invoke the model, recording a Langfuse generation when tracing is on.

    The prompt text (not the attached image) is what gets recorded as input.
    """
    if langfuse is None:
        return await llm.ainvoke(messages)

    with langfuse.start_as_current_generation(
        name=f"{artifact}-generation",
        model=model_used,
        input=prompt_text,
        metadata={"run_id": run_id, "artifact": artifact},
    ) as generation:
        start = time.time()
        response = await llm.ainvoke(messages)
        duration_ms = (time.time() - start) * 1000

        input_tokens, output_tokens = _usage(response)
        generation.update(
            output=response.content,
            usage_details={
                "input": input_tokens,
                "output": output_tokens,
                "total": input_tokens + output_tokens,
            },
            metadata={
                "duration_ms": round(duration_ms, 2),
                "cost_usd": calculate_cost(model_used, input_tokens, output_tokens),
                "model_used": model_used,
                "run_id": run_id,
            },
        )
    langfuse.flush()
    return response
