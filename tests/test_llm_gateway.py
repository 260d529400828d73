"""
AI gateway: retry policy, deployment selection and message building.
"""

import pytest

from medvoice.adapters.external.llm_gateway import OpenAIGateway, build_messages, is_rate_limit_error
from medvoice.adapters.external.prompt_registry import PromptScenario
from medvoice.application.ports.services.ai_gateway import InlinePart, TextPart
from medvoice.core.exceptions import AIServiceError, InvalidAudioFormatError, RateLimitExceededError
from medvoice.domain.enums.clinical import ModelTier

from conftest import FakeChatClient, RecordingSleep


class RateLimited(Exception):
    status_code = 429


@pytest.mark.asyncio
async def test_rate_limited_twice_then_succeeds(ai_settings):
    client = FakeChatClient(RateLimited("Too Many Requests"), RateLimited("Too Many Requests"), "hotovo")
    sleep = RecordingSleep()
    gateway = OpenAIGateway(client, ai_settings, sleep=sleep)

    result = await gateway.generate("system", [TextPart("ahoj")], scenario=PromptScenario.SUMMARIZE)

    assert result == "hotovo"
    assert len(client.calls) == 3
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_rate_limit_exhaustion_raises(ai_settings):
    client = FakeChatClient(*(Exception("RESOURCE_EXHAUSTED: quota") for _ in range(3)))
    sleep = RecordingSleep()
    gateway = OpenAIGateway(client, ai_settings, sleep=sleep)

    with pytest.raises(RateLimitExceededError) as exc_info:
        await gateway.generate("system", [TextPart("ahoj")])

    assert len(client.calls) == 3
    assert exc_info.value.details["attempts"] == 3
    # No sleep after the final attempt
    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_other_errors_are_not_retried(ai_settings):
    client = FakeChatClient(RuntimeError("connection reset"), "never used")
    sleep = RecordingSleep()
    gateway = OpenAIGateway(client, ai_settings, sleep=sleep)

    with pytest.raises(AIServiceError) as exc_info:
        await gateway.generate("system", [TextPart("ahoj")])

    assert not isinstance(exc_info.value, RateLimitExceededError)
    assert len(client.calls) == 1
    assert sleep.delays == []


def test_backoff_is_capped(ai_settings):
    gateway = OpenAIGateway(FakeChatClient(), ai_settings, sleep=RecordingSleep())
    assert [gateway.backoff_delay(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 8.0, 8.0]


@pytest.mark.asyncio
async def test_tier_and_json_mode_reach_the_client(ai_settings):
    client = FakeChatClient('{"ok": true}', "text")
    gateway = OpenAIGateway(client, ai_settings, sleep=RecordingSleep())

    decoded = await gateway.generate_json("system", [TextPart("x")], {}, model_tier=ModelTier.DEEP)
    await gateway.generate("system", [TextPart("x")], model_tier=ModelTier.FAST)

    assert decoded == {"ok": True}
    assert client.calls[0]["model"] == ai_settings.deep_deployment
    assert client.calls[0]["json_mode"] is True
    assert client.calls[1]["model"] == ai_settings.fast_deployment
    assert client.calls[1]["json_mode"] is False


@pytest.mark.asyncio
async def test_malformed_json_output_uses_fallback(ai_settings):
    gateway = OpenAIGateway(FakeChatClient("to není JSON"), ai_settings, sleep=RecordingSleep())
    assert await gateway.generate_json("system", [TextPart("x")], {"entities": []}) == {"entities": []}


@pytest.mark.asyncio
async def test_audio_requests_use_audio_deployment(ai_settings):
    client = FakeChatClient("{}")
    gateway = OpenAIGateway(client, ai_settings, sleep=RecordingSleep())

    await gateway.generate("system", [InlinePart(b"abc", "audio/wav"), TextPart("přepiš")], json_mode=True)

    assert client.calls[0]["model"] == ai_settings.audio_deployment
    content = client.calls[0]["messages"][1]["content"]
    assert content[0] == {"type": "input_audio", "input_audio": {"data": "YWJj", "format": "wav"}}
    assert content[1] == {"type": "text", "text": "přepiš"}


def test_build_messages_rejects_unknown_inline_type():
    with pytest.raises(InvalidAudioFormatError):
        build_messages("system", [InlinePart(b"x", "video/mp4")])


def test_image_parts_become_data_uris():
    messages = build_messages("", [InlinePart(b"abc", "image/png")])
    assert messages == [
        {"role": "user", "content": [{"type": "image_url", "image_url": {"url": "data:image/png;base64,YWJj"}}]}
    ]


@pytest.mark.parametrize(
    "error, expected",
    [
        (RateLimited("slow down"), True),
        (Exception("Error code: 429"), True),
        (Exception("Rate limit reached for deployment"), True),
        (Exception("RESOURCE_EXHAUSTED"), True),
        (Exception("invalid api key"), False),
        (Exception("context length exceeded: 14290 tokens"), False),
        (Exception("request 4290 failed"), False),
        (ValueError("bad request"), False),
    ],
)
def test_rate_limit_classification(error, expected):
    assert is_rate_limit_error(error) is expected
