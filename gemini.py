# gemini.py
import asyncio
import logging
from typing import AsyncIterator, Iterator, List, Optional

from google import genai
from google.genai import types

from prompts import SYSTEM_INSTRUCTION
from settings import Settings

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Raised when the remote model call fails; the message is client-facing."""


def build_client(settings: Settings) -> genai.Client:
    timeout_ms = int(max(settings.CHAT_TIMEOUT, settings.STREAM_TIMEOUT) * 1000)
    return genai.Client(
        api_key=settings.API_KEY,
        http_options=types.HttpOptions(timeout=timeout_ms),
    )


def generation_config(
    settings: Settings, system_instruction: Optional[str] = SYSTEM_INSTRUCTION
) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        system_instruction=system_instruction,
        max_output_tokens=settings.MAX_OUTPUT_TOKENS,
        temperature=settings.TEMPERATURE,
    )


def reply_text(response: Optional[types.GenerateContentResponse]) -> str:
    if response is None:
        return ""
    return (response.text or "").strip()


def iter_text_parts(chunk: types.GenerateContentResponse) -> Iterator[str]:
    """Yield every non-empty text part of every candidate, in order."""
    for cand in chunk.candidates or []:
        if cand is None or cand.content is None:
            continue
        for part in cand.content.parts or []:
            if part is None or part.thought or not part.text:
                continue
            yield part.text


def generate_text(
    client: genai.Client,
    model: str,
    contents: List[types.Content],
    config: Optional[types.GenerateContentConfig] = None,
) -> str:
    """Blocking call used by the terminal chat; errors propagate to the caller."""
    response = client.models.generate_content(model=model, contents=contents, config=config)
    return reply_text(response)


async def generate_reply(
    client: genai.Client,
    model: str,
    contents: List[types.Content],
    config: Optional[types.GenerateContentConfig],
    timeout: float,
) -> types.GenerateContentResponse:
    try:
        response = await asyncio.wait_for(
            client.aio.models.generate_content(model=model, contents=contents, config=config),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise UpstreamError("model error: context deadline exceeded") from e
    except Exception as e:
        raise UpstreamError(f"model error: {e}") from e

    if response is None:
        logger.error("llm chat: nil response from model %r", model)
        raise UpstreamError("model error: empty response")
    return response


async def _next_chunk(stream, remaining: float) -> Optional[types.GenerateContentResponse]:
    if remaining <= 0:
        raise UpstreamError("model error: context deadline exceeded")
    try:
        return await asyncio.wait_for(stream.__anext__(), timeout=remaining)
    except StopAsyncIteration:
        return None
    except asyncio.TimeoutError as e:
        raise UpstreamError("model error: context deadline exceeded") from e
    except Exception as e:
        raise UpstreamError(f"model error: {e}") from e


async def stream_reply(
    client: genai.Client,
    model: str,
    contents: List[types.Content],
    config: Optional[types.GenerateContentConfig],
    timeout: float,
) -> AsyncIterator[str]:
    """Yield text fragments as they arrive, bounded by ``timeout`` seconds overall."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    try:
        stream = await asyncio.wait_for(
            client.aio.models.generate_content_stream(model=model, contents=contents, config=config),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise UpstreamError("model error: context deadline exceeded") from e
    except Exception as e:
        raise UpstreamError(f"model error: {e}") from e

    try:
        while True:
            chunk = await _next_chunk(stream, deadline - loop.time())
            if chunk is None:
                break
            for text in iter_text_parts(chunk):
                yield text
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()
