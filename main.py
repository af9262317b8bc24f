# main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from google import genai

import sse
from decoder import decode_chat_request
from gemini import UpstreamError, build_client, generate_reply, generation_config, reply_text, stream_reply
from models import ChatRequest, ChatResponse, EmptyReplyResponse, ErrorResponse, PromptResponse
from prompts import build_contents, build_prompt_contents, parse_prompt_list
from settings import Settings, configure_logging, get_settings

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    settings.require_api_key()
    logger.info("HTTP service ready (default model %s)", settings.MODEL_NAME)
    yield


app = FastAPI(title="Guru Chat API", version="1.0.0", lifespan=lifespan)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Google client (created on first use) ---
_client: Optional[genai.Client] = None


def get_client() -> genai.Client:
    global _client
    if _client is None:
        _client = build_client(get_settings())
    return _client


# --- Error rendering: every failure is {"error": "..."} ---
@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(UpstreamError)
async def upstream_error(request: Request, exc: UpstreamError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content=ErrorResponse(error=str(exc)).model_dump())


@app.get("/")
def hello():
    return {"message": "Hello, world!"}


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.post("/llm/chat", response_model=ChatResponse, responses={502: {"model": ErrorResponse}})
async def chat(
    req: ChatRequest = Depends(decode_chat_request),
    client: genai.Client = Depends(get_client),
    settings: Settings = Depends(get_settings),
):
    contents, model = build_contents(req, settings.MODEL_NAME)
    response = await generate_reply(
        client, model, contents, generation_config(settings), settings.CHAT_TIMEOUT
    )

    reply = reply_text(response)
    if not reply:
        # Never return a blank body
        logger.warning("llm chat: empty reply from model %r", model)
        return JSONResponse(
            EmptyReplyResponse(
                model=model,
                note="empty model reply (blocked or no text parts)",
                ts=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            ).model_dump()
        )

    return ChatResponse(reply=reply, model=model)


@app.post("/llm/chat/partial")
async def chat_stream(
    req: ChatRequest = Depends(decode_chat_request),
    client: genai.Client = Depends(get_client),
    settings: Settings = Depends(get_settings),
):
    contents, model = build_contents(req, settings.MODEL_NAME)
    fragments = stream_reply(
        client, model, contents, generation_config(settings), settings.STREAM_TIMEOUT
    )
    return StreamingResponse(
        sse.relay(fragments, model),
        media_type=sse.MEDIA_TYPE,
        headers=sse.STREAM_HEADERS,
    )


@app.post("/llm/chat/prompts", response_model=PromptResponse, responses={502: {"model": ErrorResponse}})
async def suggest_prompts(
    req: ChatRequest = Depends(decode_chat_request),
    client: genai.Client = Depends(get_client),
    settings: Settings = Depends(get_settings),
):
    contents, model = build_prompt_contents(req, settings.MODEL_NAME)
    response = await generate_reply(
        client, model, contents, generation_config(settings), settings.CHAT_TIMEOUT
    )
    return PromptResponse(prompts=parse_prompt_list(reply_text(response)), model=model)
