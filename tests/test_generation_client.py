import asyncio

import pytest
from langchain_core.messages import AIMessage

from conftest import PASSING_COMPONENT, TINY_PNG
from errors import TransportError
from generation_client import GenerationClient, GenerationRequest


class FakeChatModel:
    def __init__(self, reply=None, error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.messages = []

    async def ainvoke(self, messages):
        self.messages.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def make_client(settings, monkeypatch):
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)

    def _make(model, **overrides):
        client = GenerationClient(settings.model_copy(update=overrides), run_id="run-1")
        chosen = []

        def fake_llm(name, temperature):
            chosen.append((name, temperature))
            return model

        monkeypatch.setattr(client, "_llm", fake_llm)
        return client, chosen

    return _make


def _request(image=None):
    return GenerationRequest(
        artifact="Widget",
        kind="component",
        system_prompt="system",
        prompt="build it",
        temperature=0.3,
        image_png=image,
    )


def _reply(text, input_tokens=120, output_tokens=80):
    return AIMessage(
        content=text,
        usage_metadata={
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
        },
    )


def test_completion_carries_usage_and_cost(make_client):
    client, chosen = make_client(FakeChatModel(_reply(PASSING_COMPONENT)))
    completion = asyncio.run(client.complete(_request()))

    assert completion.text == PASSING_COMPONENT
    assert completion.model == "gpt-4o"
    assert (completion.input_tokens, completion.output_tokens) == (120, 80)
    assert completion.cost_usd == pytest.approx((120 * 2.5 + 80 * 10.0) / 1_000_000)
    assert chosen == [("gpt-4o", 0.3)]


def test_text_request_sends_plain_content(make_client):
    model = FakeChatModel(_reply(PASSING_COMPONENT))
    client, _ = make_client(model)
    asyncio.run(client.complete(_request()))

    system, human = model.messages[0]
    assert system.content == "system"
    assert human.content == "build it"


def test_image_request_uses_vision_model(make_client):
    model = FakeChatModel(_reply(PASSING_COMPONENT))
    client, chosen = make_client(model, llm_vision_model="gpt-4.1")
    asyncio.run(client.complete(_request(image=TINY_PNG)))

    assert chosen == [("gpt-4.1", 0.3)]
    _, human = model.messages[0]
    text_part, image = human.content
    assert text_part == {"type": "text", "text": "build it"}
    assert image["type"] == "image_url"
    assert image["image_url"]["url"].startswith("data:image/png;base64,")


def test_timeout_is_a_transport_error(make_client):
    client, _ = make_client(FakeChatModel(_reply(PASSING_COMPONENT), delay=0.5), llm_timeout=0.01)
    with pytest.raises(TransportError, match="no response within"):
        asyncio.run(client.complete(_request()))


def test_service_error_is_a_transport_error(make_client):
    client, _ = make_client(FakeChatModel(error=RuntimeError("502 Bad Gateway")))
    with pytest.raises(TransportError, match="502 Bad Gateway"):
        asyncio.run(client.complete(_request()))


@pytest.mark.parametrize("content", ["", "   \n", [{"type": "text", "text": "x"}]])
def test_empty_or_malformed_reply_is_a_transport_error(make_client, content):
    client, _ = make_client(FakeChatModel(AIMessage(content=content)))
    with pytest.raises(TransportError, match="empty or malformed"):
        asyncio.run(client.complete(_request()))
