"""End-to-end tests: identifier -> credential -> adapter -> canonical events."""
import asyncio

import httpx
import pytest

from conftest import (
    FakeCredentialRow,
    FakeKeyStore,
    RecordingTransport,
    ScriptedAdapter,
    collect,
    make_settings,
    sse_response,
)
from praxis.core.errors import Cancelled, ErrorKind, MissingCredential, UpstreamHTTPError, UpstreamProtocolError
from praxis.providers.base import RawFrame
from praxis.providers.registry import ProviderRegistry
from praxis.routing.credentials import CredentialResolver
from praxis.routing.identifiers import ProviderTag
from praxis.routing.service import ModelRouter
from praxis.routing.session import SessionState
from praxis.schemas.chat import ChatRequest, Message
from praxis.schemas.stream import Done, Error, ReasoningDelta, TextDelta


def _router(settings=None, store=None, overrides=None, client_factory=None) -> ModelRouter:
    settings = settings or make_settings()
    registry = ProviderRegistry(settings, overrides=overrides, client_factory=client_factory)
    return ModelRouter(settings, registry, CredentialResolver(settings, store or FakeKeyStore()))


def _request(model: str) -> ChatRequest:
    return ChatRequest(model=model, messages=[Message(role="user", content="Hi")])


@pytest.mark.asyncio
async def test_openrouter_without_any_key_fails_before_upstream():
    transport = RecordingTransport(lambda req: sse_response([b"data: [DONE]\n"]))
    router = _router(client_factory=transport.client_factory())

    with pytest.raises(MissingCredential):
        await router.open_stream(_request("openrouter/openai/gpt-4o"), user_id=None)

    assert transport.requests == []


@pytest.mark.asyncio
async def test_modelhub_routes_to_gateway_adapter():
    router = _router()
    assert router.registry.get(ProviderTag.MODELHUB) is router.registry.get(ProviderTag.GATEWAY)

    transport = RecordingTransport(lambda req: sse_response([
        b'data: {"choices":[{"delta":{"content":"hub"}}]}\n',
        b"data: [DONE]\n",
    ]))
    router = _router(client_factory=transport.client_factory())
    session = await router.open_stream(_request("modelhub/acme/chat-7b"))

    assert await collect(session) == [TextDelta(text="hub"), Done()]
    assert b'"huggingface/acme/chat-7b"' in transport.requests[0].content


@pytest.mark.asyncio
async def test_user_key_reaches_the_wire():
    transport = RecordingTransport(lambda req: sse_response([b"data: [DONE]\n"]))
    store = FakeKeyStore({("u1", "openrouter"): FakeCredentialRow("user-key")})
    router = _router(
        settings=make_settings(openrouter_api_key="env-key"),
        store=store,
        client_factory=transport.client_factory(),
    )

    session = await router.open_stream(_request("openrouter/openai/gpt-4o"), user_id="u1")
    assert await collect(session) == [Done()]
    assert transport.requests[0].headers["authorization"] == "Bearer user-key"


@pytest.mark.asyncio
async def test_open_stream_is_lazy_until_first_pull():
    adapter = ScriptedAdapter([RawFrame("a")])
    router = _router(overrides={ProviderTag.GATEWAY: adapter})

    session = await router.open_stream(_request("chat-model"))
    assert adapter.calls == 0
    assert adapter.started is False
    assert session.state is SessionState.OPEN

    assert await collect(session) == [TextDelta(text="a"), Done()]
    assert session.state is SessionState.TERMINAL
    assert adapter.closed is True


@pytest.mark.asyncio
async def test_frames_map_one_to_one_in_order():
    adapter = ScriptedAdapter([RawFrame("a"), RawFrame("r", reasoning=True), RawFrame(""), RawFrame("b")])
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    session = await router.open_stream(_request("chat-model"))
    assert await collect(session) == [
        TextDelta(text="a"),
        ReasoningDelta(text="r"),
        TextDelta(text="b"),
        Done(),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error,kind",
    [
        (UpstreamHTTPError("gateway", 500, "boom"), ErrorKind.UPSTREAM_HTTP),
        (UpstreamProtocolError("gateway", "bad frame"), ErrorKind.UPSTREAM_PROTOCOL),
        (httpx.ReadError("connection reset"), ErrorKind.UPSTREAM_CONNECTION),
        (RuntimeError("bug"), ErrorKind.INTERNAL),
    ],
)
async def test_mid_stream_failure_becomes_single_terminal_error(error, kind):
    adapter = ScriptedAdapter([RawFrame("partial")], error=error)
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    session = await router.open_stream(_request("chat-model"))

    events = await collect(session)

    assert events[0] == TextDelta(text="partial")
    assert isinstance(events[-1], Error)
    assert events[-1].kind is kind
    assert len(events) == 2
    assert session.state is SessionState.TERMINAL
    # nothing follows a terminal event
    assert await collect(session) == []


@pytest.mark.asyncio
async def test_upstream_http_status_is_in_band_error():
    transport = RecordingTransport(lambda req: httpx.Response(429, text="slow down"))
    router = _router(
        settings=make_settings(openrouter_api_key="env-key"),
        client_factory=transport.client_factory(),
    )
    session = await router.open_stream(_request("openrouter/openai/gpt-4o"))
    events = await collect(session)
    assert len(events) == 1
    assert events[0].kind is ErrorKind.UPSTREAM_HTTP
    assert "Too many requests" in events[0].message


@pytest.mark.asyncio
async def test_done_sentinel_ends_stream_over_the_wire():
    transport = RecordingTransport(lambda req: sse_response([
        b'data: {"choices":[{"delta":{"con',
        b'tent":"Hi"}}]}\n',
        b"data: garbage\n",
        b"data: [DONE]\n",
        b'data: {"choices":[{"delta":{"content":"late"}}]}\n',
    ]))
    router = _router(
        settings=make_settings(openrouter_api_key="env-key"),
        client_factory=transport.client_factory(),
    )
    session = await router.open_stream(_request("openrouter/openai/gpt-4o"))
    assert await collect(session) == [TextDelta(text="Hi"), Done()]


@pytest.mark.asyncio
async def test_reasoning_model_splits_thinking_channel():
    adapter = ScriptedAdapter([RawFrame("<thinking>ab"), RawFrame("cd</thinking>ef")])
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    session = await router.open_stream(_request("anthropic/claude-3.7-sonnet-thinking"))

    events = await collect(session)

    reasoning = "".join(e.text for e in events if isinstance(e, ReasoningDelta))
    text = "".join(e.text for e in events if isinstance(e, TextDelta))
    assert (reasoning, text) == ("abcd", "ef")
    assert isinstance(events[-1], Done)
    last_reasoning = max(i for i, e in enumerate(events) if isinstance(e, ReasoningDelta))
    first_text = min(i for i, e in enumerate(events) if isinstance(e, TextDelta))
    assert last_reasoning < first_text


@pytest.mark.asyncio
async def test_non_reasoning_model_keeps_tags_as_text():
    adapter = ScriptedAdapter([RawFrame("<thinking>x</thinking>")])
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    session = await router.open_stream(_request("chat-model"))
    assert await collect(session) == [TextDelta(text="<thinking>x</thinking>"), Done()]


@pytest.mark.asyncio
async def test_direct_provider_reasoning_model_keeps_tags_as_text():
    adapter = ScriptedAdapter([RawFrame("<thinking>x</thinking>y")])
    router = _router(
        settings=make_settings(openrouter_api_key="env-key"),
        overrides={ProviderTag.OPENROUTER: adapter},
    )
    session = await router.open_stream(_request("openrouter/acme/model-thinking"))
    assert session.target.is_reasoning is True
    assert await collect(session) == [TextDelta(text="<thinking>x</thinking>y"), Done()]


@pytest.mark.asyncio
async def test_cancel_mid_stream_releases_adapter_and_stops_delivery():
    adapter = ScriptedAdapter([RawFrame(str(i)) for i in range(100)])
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    session = await router.open_stream(_request("chat-model"))

    first = await session.__anext__()
    assert first == TextDelta(text="0")

    await asyncio.wait_for(session.cancel(), timeout=1.0)

    assert adapter.closed is True
    assert adapter.pulled == 1
    assert session.state is SessionState.CANCELLED
    assert await collect(session) == []


@pytest.mark.asyncio
async def test_cancel_while_pull_is_pending_drops_late_event():
    release = asyncio.Event()

    class GatedAdapter(ScriptedAdapter):
        async def stream(self, target, credential, request):
            self.started = True
            try:
                yield RawFrame("first")
                await release.wait()
                yield RawFrame("after-cancel")
            finally:
                self.closed = True

    adapter = GatedAdapter()
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    session = await router.open_stream(_request("chat-model"))
    assert await session.__anext__() == TextDelta(text="first")

    pending = asyncio.create_task(session.__anext__())
    for _ in range(5):
        await asyncio.sleep(0)
    assert not pending.done()

    await asyncio.wait_for(session.cancel(), timeout=1.0)
    release.set()

    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(pending, timeout=1.0)
    assert adapter.closed is True
    assert session.state is SessionState.CANCELLED
    assert await collect(session) == []


@pytest.mark.asyncio
async def test_context_manager_exit_closes_upstream():
    adapter = ScriptedAdapter([RawFrame("a"), RawFrame("b")])
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    async with await router.open_stream(_request("chat-model")) as session:
        async for event in session:
            break
    assert adapter.closed is True
    assert session.state is SessionState.CANCELLED


@pytest.mark.asyncio
async def test_cancelled_upstream_halts_without_terminal_event():
    adapter = ScriptedAdapter([RawFrame("a")], error=Cancelled())
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    session = await router.open_stream(_request("chat-model"))
    assert await collect(session) == [TextDelta(text="a")]
    assert session.state is SessionState.CANCELLED


@pytest.mark.asyncio
async def test_task_cancellation_closes_upstream():
    release = asyncio.Event()

    class SlowAdapter(ScriptedAdapter):
        async def stream(self, target, credential, request):
            try:
                yield RawFrame("first")
                await release.wait()
                yield RawFrame("never")
            finally:
                self.closed = True

    adapter = SlowAdapter()
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    session = await router.open_stream(_request("chat-model"))
    received = []

    async def consume():
        try:
            async for event in session:
                received.append(event)
        finally:
            await session.aclose()

    task = asyncio.create_task(consume())
    while not received:
        await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert received == [TextDelta(text="first")]
    assert adapter.closed is True


@pytest.mark.asyncio
async def test_generate_title_collects_text():
    adapter = ScriptedAdapter([RawFrame(" Weather "), RawFrame("in Paris ")])
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    assert await router.generate_title("What's the weather in Paris?") == "Weather in Paris"


@pytest.mark.asyncio
async def test_generate_title_falls_back_on_error():
    adapter = ScriptedAdapter([], error=UpstreamHTTPError("gateway", 401))
    router = _router(overrides={ProviderTag.GATEWAY: adapter})
    message = "x" * 80
    assert await router.generate_title(message) == "x" * 50


@pytest.mark.asyncio
async def test_generate_title_falls_back_when_credential_missing():
    router = _router(settings=make_settings(title_model="openrouter/openai/gpt-4o"))
    assert await router.generate_title("   ") == "New chat"


@pytest.mark.asyncio
async def test_list_models_groups_catalog_by_provider():
    grouped = await _router().list_models()
    assert set(grouped) == {"google-api", "openrouter"}
    assert all(m.id.startswith("openrouter/") for m in grouped["openrouter"])
