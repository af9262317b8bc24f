# sse.py
import asyncio
import json
import logging
from typing import Any, AsyncIterator, Dict

from gemini import UpstreamError

logger = logging.getLogger(__name__)

MEDIA_TYPE = "text/event-stream"

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # nginx
}


def format_event(event: str, data: str) -> str:
    """Frame one Server-Sent Event; multi-line data becomes several data lines."""
    lines = []
    if event:
        lines.append(f"event: {event}")
    for line in data.split("\n"):
        lines.append(f"data: {line}")
    return "\n".join(lines) + "\n\n"


def json_event(event: str, payload: Dict[str, Any]) -> str:
    return format_event(event, json.dumps(payload, ensure_ascii=False))


async def relay(fragments: AsyncIterator[str], model: str) -> AsyncIterator[str]:
    """Re-frame streamed text fragments as start/partial/complete/done events."""
    yield json_event("start", {"model": model})

    parts = []
    try:
        async for part in fragments:
            parts.append(part)
            yield json_event("partial", {"part": part})
    except UpstreamError as e:
        logger.warning("llm chat stream: %s", e)
        yield json_event("error", {"error": str(e)})
        yield json_event("done", {})
        return
    except (asyncio.CancelledError, GeneratorExit):
        logger.info("llm chat stream: client disconnected after %d parts", len(parts))
        raise
    finally:
        aclose = getattr(fragments, "aclose", None)
        if aclose is not None:
            await aclose()

    yield json_event("complete", {"reply": "".join(parts), "model": model})
    yield json_event("done", {})
