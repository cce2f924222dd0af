# Tests for plain-chat generation sessions
# Created: 2026-10-05

import asyncio
import base64

import pytest

from fireflies.chat import prompts
from fireflies.chat.history import InMemoryChatHistory, Role
from fireflies.chat.session import (
    GenerationController,
    GenerationSession,
    SessionState,
    encode_image,
)
from fireflies.config import ChatConfig
from fireflies.errors import ProxyError, SessionBusyError

CONFIG = ChatConfig(model="FireFlies:latest", ollama_base_url="http://ollama.test:11434")


@pytest.fixture
def history():
    return InMemoryChatHistory()


@pytest.fixture
def controller(proxy, history):
    return GenerationController(proxy, history, CONFIG, vision_model="gemma3:4b")


async def _new_chat(history, text="halo"):
    chat_id = await history.create_session("Test")
    await history.add_message(chat_id, Role.USER, text)
    return chat_id


async def _wait_for(predicate, attempts=200):
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


class _SlowHistory(InMemoryChatHistory):
    """History whose AI context read blocks until released."""

    def __init__(self):
        super().__init__()
        self.reading = asyncio.Event()
        self.release = asyncio.Event()

    async def history_for_ai(self, chat_id):
        self.reading.set()
        await self.release.wait()
        return await super().history_for_ai(chat_id)


def _hanging_generate(started: asyncio.Event):
    async def generate(*args, **kwargs):
        started.set()
        await asyncio.Event().wait()

    return generate


class TestEncodeImage:
    def test_bytes(self):
        assert encode_image(b"hello") == base64.b64encode(b"hello").decode()

    def test_data_url(self):
        assert encode_image("data:image/png;base64,aGVsbG8=") == "aGVsbG8="

    def test_plain_base64(self):
        assert encode_image("aGVsbG8=") == "aGVsbG8="


class TestGenerationController:
    async def test_completes(self, controller, proxy, history):
        chat_id = await _new_chat(history)

        outcome = await controller.submit(chat_id, "halo")

        assert outcome.state is SessionState.COMPLETED
        assert outcome.message.content == "Jawaban model."
        assert controller.state is SessionState.IDLE
        assert controller.last_state is SessionState.COMPLETED

        args, kwargs = proxy.generate.call_args
        assert args == ("halo", "FireFlies:latest")
        assert kwargs["history"] == [{"role": "user", "content": "halo"}]
        assert kwargs["base_url"] == "http://ollama.test:11434"

        messages = await history.messages(chat_id)
        assert [m.role for m in messages] == [Role.USER, Role.ASSISTANT]

    async def test_vision_uses_vision_model_without_history(self, controller, proxy, history):
        chat_id = await _new_chat(history, "apa ini?")

        await controller.submit(chat_id, "apa ini?", b"\x89PNG")

        args, kwargs = proxy.generate.call_args
        assert args == ("apa ini?", "gemma3:4b")
        assert kwargs["image"] == base64.b64encode(b"\x89PNG").decode()
        assert "history" not in kwargs

    async def test_empty_response(self, controller, proxy, history):
        proxy.generate.return_value = ""
        chat_id = await _new_chat(history)

        outcome = await controller.submit(chat_id, "halo")
        assert outcome.message.content == prompts.NO_AI_RESPONSE

    async def test_inference_error_writes_fallback(self, controller, proxy, history):
        proxy.generate.side_effect = ProxyError("Proxy generate returned HTTP 500")
        chat_id = await _new_chat(history)

        outcome = await controller.submit(chat_id, "halo")

        assert outcome.state is SessionState.ERRORED
        assert outcome.message.content == prompts.GENERATION_FAILED
        assistant = [m for m in await history.messages(chat_id) if m.role is Role.ASSISTANT]
        assert len(assistant) == 1
        assert controller.state is SessionState.IDLE

    async def test_stop_cancels_generation(self, controller, proxy, history):
        started = asyncio.Event()
        proxy.generate.side_effect = _hanging_generate(started)
        chat_id = await _new_chat(history)

        task = asyncio.create_task(controller.submit(chat_id, "halo"))
        await asyncio.wait_for(started.wait(), timeout=1)
        await _wait_for(lambda: controller.state is SessionState.STREAMING)

        assert await controller.stop() is True
        outcome = await asyncio.wait_for(task, timeout=1)

        assert outcome.state is SessionState.CANCELLED
        assert outcome.message.content == prompts.GENERATION_STOPPED
        assert controller.state is SessionState.IDLE
        assert controller.last_state is SessionState.CANCELLED

        await asyncio.sleep(0)
        assistant = [m for m in await history.messages(chat_id) if m.role is Role.ASSISTANT]
        assert [m.content for m in assistant] == [prompts.GENERATION_STOPPED]

    async def test_busy_while_streaming(self, controller, proxy, history):
        started = asyncio.Event()
        proxy.generate.side_effect = _hanging_generate(started)
        chat_id = await _new_chat(history)

        task = asyncio.create_task(controller.submit(chat_id, "halo"))
        await asyncio.wait_for(started.wait(), timeout=1)

        assert controller.busy
        with pytest.raises(SessionBusyError):
            await controller.submit(chat_id, "lagi")

        await controller.stop()
        await task
        assert not controller.busy

    async def test_stop_when_idle(self, controller):
        assert await controller.stop() is False

    async def test_outer_cancellation_propagates(self, controller, proxy, history):
        started = asyncio.Event()
        proxy.generate.side_effect = _hanging_generate(started)
        chat_id = await _new_chat(history)

        task = asyncio.create_task(controller.submit(chat_id, "halo"))
        await asyncio.wait_for(started.wait(), timeout=1)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert controller.state is SessionState.IDLE

    async def test_new_generation_after_stop(self, controller, proxy, history):
        started = asyncio.Event()
        proxy.generate.side_effect = _hanging_generate(started)
        chat_id = await _new_chat(history)

        task = asyncio.create_task(controller.submit(chat_id, "halo"))
        await asyncio.wait_for(started.wait(), timeout=1)
        await controller.stop()
        await task

        proxy.generate.side_effect = None
        proxy.generate.return_value = "Jawaban kedua."
        outcome = await controller.submit(chat_id, "lagi")
        assert outcome.message.content == "Jawaban kedua."

    async def test_stop_after_inference_finished(self, controller):
        finished = asyncio.create_task(asyncio.sleep(0))
        await finished
        controller._session = GenerationSession(
            "c", "FireFlies:latest", False, state=SessionState.STREAMING, task=finished
        )

        assert await controller.stop() is False
        assert controller.session.cancel_requested is False

    async def test_stop_while_sending(self, proxy):
        history = _SlowHistory()
        controller = GenerationController(proxy, history, CONFIG)
        chat_id = await _new_chat(history)

        task = asyncio.create_task(controller.submit(chat_id, "halo"))
        await asyncio.wait_for(history.reading.wait(), timeout=1)
        assert controller.state is SessionState.SENDING

        assert await controller.stop() is True
        history.release.set()
        outcome = await asyncio.wait_for(task, timeout=1)

        assert outcome.state is SessionState.CANCELLED
        assert outcome.message.content == prompts.GENERATION_STOPPED
        proxy.generate.assert_called_once()
        proxy.generate.assert_not_awaited()
        assert controller.state is SessionState.IDLE
