"""Client handle for the hosted code-generation service.

One ``GenerationClient`` is built in ``main`` and handed to every stage that
needs it. Any failure of a single request surfaces as ``TransportError``.
"""

import asyncio
import base64
import logging
import time
from dataclasses import dataclass

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from config import Settings
from errors import TransportError
from observability.langfuse_tracer import build_langfuse, traced_call
from observability.metrics import GENERATION_CALLS, GENERATION_LATENCY, TOKENS_USED, TRANSPORT_ERRORS
from scaling.config import calculate_cost
from scaling.model_selector import get_model

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRequest:
    artifact: str
    kind: str
    system_prompt: str
    prompt: str
    temperature: float
    image_png: bytes | None = None


@dataclass(frozen=True)
class Completion:
    text: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def cost_usd(self) -> float:
        return calculate_cost(self.model, self.input_tokens, self.output_tokens)


def image_part(png: bytes) -> dict:
    encoded = base64.b64encode(png).decode("ascii")
    return {
        "type": "image_url",
        "image_url": {"url": f"data:image/png;base64,{encoded}", "detail": "high"},
    }


class GenerationClient:
    """Chat-completion access with timeout, tracing and token accounting."""

    def __init__(self, settings: Settings, run_id: str = "", langfuse=None):
        self._settings = settings
        self._run_id = run_id
        self._langfuse = langfuse if langfuse is not None else build_langfuse()
        self._models: dict[tuple[str, float], ChatOpenAI] = {}

    def _llm(self, model: str, temperature: float) -> ChatOpenAI:
        key = (model, temperature)
        if key not in self._models:
            self._models[key] = ChatOpenAI(
                model=model,
                temperature=temperature,
                max_tokens=self._settings.llm_max_tokens,
                api_key=self._settings.openai_api_key,
                max_retries=0,
            )
        return self._models[key]

    async def complete(self, request: GenerationRequest) -> Completion:
        with_image = request.image_png is not None
        model = get_model(self._settings, request.artifact, with_image=with_image)
        content: str | list[dict] = request.prompt
        if with_image:
            content = [{"type": "text", "text": request.prompt}, image_part(request.image_png)]
        messages = [SystemMessage(content=request.system_prompt), HumanMessage(content=content)]

        GENERATION_CALLS.labels(kind=request.kind).inc()
        start = time.time()
        try:
            response = await asyncio.wait_for(
                traced_call(
                    self._llm(model, request.temperature),
                    messages,
                    artifact=request.artifact,
                    model_used=model,
                    prompt_text=request.prompt,
                    langfuse=self._langfuse,
                    run_id=self._run_id,
                ),
                timeout=self._settings.llm_timeout,
            )
        except asyncio.TimeoutError as exc:
            TRANSPORT_ERRORS.labels(kind=request.kind).inc()
            raise TransportError(
                f"{request.artifact}: no response within {self._settings.llm_timeout:.0f}s"
            ) from exc
        except Exception as exc:  # openai/httpx errors all count as transport failures
            TRANSPORT_ERRORS.labels(kind=request.kind).inc()
            raise TransportError(f"{request.artifact}: {exc}") from exc
        finally:
            GENERATION_LATENCY.labels(kind=request.kind).observe(time.time() - start)

        text = response.content if isinstance(response.content, str) else ""
        if not text.strip():
            TRANSPORT_ERRORS.labels(kind=request.kind).inc()
            raise TransportError(f"{request.artifact}: empty or malformed response")

        usage = response.usage_metadata or {}
        completion = Completion(
            text=text,
            model=model,
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0),
        )
        TOKENS_USED.inc(completion.input_tokens + completion.output_tokens)
        return completion
