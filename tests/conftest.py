import asyncio
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from google.genai import types

from main import app, get_client
from settings import Settings, get_settings


def make_response(*texts):
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=t) for t in texts])
            )
        ]
    )


class FakeGemini:
    """Stands in for google.genai.Client on both the sync and the async surface."""

    def __init__(self):
        self.calls = []
        self.response = make_response("Om shanti.")
        self.error = None
        self.delay = 0.0
        self.chunks = []
        self.stream_error = None
        self.models = SimpleNamespace(generate_content=self._generate_sync)
        self.aio = SimpleNamespace(
            models=SimpleNamespace(
                generate_content=self._generate,
                generate_content_stream=self._generate_stream,
            )
        )

    def _record(self, model, contents, config):
        self.calls.append({"model": model, "contents": list(contents), "config": config})

    def _generate_sync(self, model, contents, config=None):
        self._record(model, contents, config)
        if self.error:
            raise self.error
        return self.response

    async def _generate(self, model, contents, config=None):
        self._record(model, contents, config)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.response

    async def _generate_stream(self, model, contents, config=None):
        self._record(model, contents, config)
        if self.error:
            raise self.error
        return self._chunks()

    async def _chunks(self):
        for chunk in self.chunks:
            if self.delay:
                await asyncio.sleep(self.delay)
            yield chunk
        if self.stream_error:
            raise self.stream_error


def parse_sse(body):
    events = []
    for block in body.strip().split("\n\n"):
        name, data = None, []
        for line in block.split("\n"):
            if line.startswith("event: "):
                name = line[len("event: "):]
            elif line.startswith("data: "):
                data.append(line[len("data: "):])
        events.append((name, "\n".join(data)))
    return events


@pytest.fixture
def fake():
    return FakeGemini()


@pytest.fixture
def settings():
    return Settings(API_KEY="test-key", MODEL_NAME="gemini-2.5-flash")


@pytest.fixture
def api(fake, settings):
    app.dependency_overrides[get_client] = lambda: fake
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()
