# decoder.py
from fastapi import Depends, HTTPException, Request
from pydantic import ValidationError

from models import ChatRequest
from settings import Settings, get_settings

JSON_MEDIA_TYPE = "application/json"


def media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _describe(e: ValidationError) -> str:
    err = e.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


async def read_body(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise HTTPException(status_code=400, detail="invalid JSON: request body too large")

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise HTTPException(status_code=400, detail="invalid JSON: request body too large")
    return bytes(body)


async def decode_chat_request(
    request: Request, settings: Settings = Depends(get_settings)
) -> ChatRequest:
    """Parse the POST body into a ChatRequest or raise the matching 4xx.

    Non-POST requests never get here: the routes are POST-only, so the router
    answers them with 405 and an ``Allow`` header.
    """
    if media_type(request.headers.get("content-type", "")) != JSON_MEDIA_TYPE:
        raise HTTPException(status_code=415, detail="Content-Type must be application/json")

    body = await read_body(request, settings.MAX_BODY_BYTES)
    try:
        req = ChatRequest.model_validate_json(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"invalid JSON: {_describe(e)}")

    if not req.has_content():
        raise HTTPException(status_code=400, detail="message required (or history/seed)")
    return req
