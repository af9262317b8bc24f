#!/usr/bin/env python3
"""Terminal front-end for the Guru chat.

Usage
-----
    python cli.py [chat] [--model MODEL]      interactive chat on stdin/stdout
    python cli.py serve [--host H] [--port P]  run the HTTP service

Type ``exit`` (any case) to leave the chat. ``GEMINI_API_KEY`` must be set,
either in the environment or in a ``.env`` file.
"""

from __future__ import annotations

import argparse
import itertools
import logging
import os
import signal
import sys
import threading
from datetime import datetime
from typing import Optional, TextIO

import uvicorn
from google import genai

from gemini import build_client, generate_text, generation_config
from settings import Settings, configure_logging, get_settings
from transcript import Transcript

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ANSI colour helpers
# ---------------------------------------------------------------------------


class Ansi:  # pylint: disable=too-few-public-methods
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    ITALIC = "\033[3m"

    FG_RED = "\033[31m"
    FG_YELLOW = "\033[33m"
    FG_BLUE = "\033[34m"
    FG_MAGENTA = "\033[35m"
    FG_CYAN = "\033[36m"
    FG_GRAY = "\033[90m"

    @staticmethod
    def style(text: str, *codes: str) -> str:
        """Return `text` wrapped in the given ANSI codes unless NO_COLOR is set."""
        if os.getenv("NO_COLOR") is not None:
            return text
        return "".join(codes) + text + Ansi.RESET


def banner() -> str:
    return (
        Ansi.style("💬 Gemini Chat", Ansi.BOLD, Ansi.FG_CYAN)
        + "  "
        + Ansi.style("(type 'exit' to quit)", Ansi.DIM)
    )


def user_prompt() -> str:
    return Ansi.style("You", Ansi.BOLD, Ansi.FG_BLUE) + Ansi.style(":", Ansi.BOLD) + " "


def ai_header(now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%H:%M:%S")
    return Ansi.style("AI", Ansi.BOLD, Ansi.FG_MAGENTA) + Ansi.style(f" [{stamp}]", Ansi.BOLD)


# ---------------------------------------------------------------------------
# Spinner shown while waiting for the model
# ---------------------------------------------------------------------------


class Spinner:
    _frames = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")

    def __init__(self, text: str = "thinking…", out: TextIO = sys.stdout, delay: float = 0.08):
        self._text = text
        self._out = out
        self._delay = delay
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _spin(self) -> None:  # runs in a background thread
        for frame in itertools.cycle(self._frames):
            if self._stop_event.wait(self._delay):
                break
            self._out.write("\r" + Ansi.style(f"{frame} {self._text}", Ansi.FG_GRAY))
            self._out.flush()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._spin, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join()
        self._thread = None
        # clear the spinner line
        self._out.write("\r" + " " * 60 + "\r")
        self._out.flush()


# ---------------------------------------------------------------------------
# Chat loop
# ---------------------------------------------------------------------------


def run_chat(
    client: genai.Client,
    settings: Settings,
    model: Optional[str] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """Read lines until ``exit`` or EOF, keeping the whole conversation as context."""
    stdin = stdin or sys.stdin
    out = stdout or sys.stdout
    model = model or settings.MODEL_NAME
    config = generation_config(settings)
    transcript = Transcript()

    out.write(banner() + "\n")
    while True:
        out.write("\n" + user_prompt())
        out.flush()

        line = stdin.readline()
        if not line:
            out.write("\n" + Ansi.style("👋 Goodbye!", Ansi.FG_YELLOW) + "\n")
            return 0

        user_input = line.strip()
        if user_input.lower() == "exit":
            out.write(Ansi.style("👋 Goodbye!", Ansi.FG_YELLOW) + "\n")
            return 0
        if not user_input:
            continue

        transcript.add_user(user_input)

        spinner = Spinner(out=out) if out.isatty() else None
        if spinner:
            spinner.start()
        try:
            reply = generate_text(client, model, transcript.contents(), config)
        except Exception as e:
            logger.debug("generate_content failed", exc_info=True)
            out.write(Ansi.style("Error", Ansi.BOLD, Ansi.FG_RED) + f": {e}\n")
            continue
        finally:
            if spinner:
                spinner.stop()

        out.write(ai_header() + "\n")
        if reply:
            out.write(Ansi.style(reply, Ansi.ITALIC) + "\n")
            transcript.add_model(reply)
        else:
            out.write(Ansi.style("(empty model reply)", Ansi.DIM) + "\n")


def install_signal_handlers(out: TextIO = sys.stdout) -> None:
    def _bye(signum, frame):  # noqa: ARG001
        out.write("\n" + Ansi.style("👋 Bye!", Ansi.FG_YELLOW) + "\n")
        out.flush()
        sys.exit(0)

    signal.signal(signal.SIGINT, _bye)
    signal.signal(signal.SIGTERM, _bye)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="guru-chat", description="Chat with Gemini from the terminal or over HTTP.")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command")

    chat_p = sub.add_parser("chat", help="Interactive terminal chat (default)")
    chat_p.add_argument("--model", default=None, help="Model to use instead of MODEL_NAME")

    serve_p = sub.add_parser("serve", help="Run the HTTP service")
    serve_p.add_argument("--host", default=None)
    serve_p.add_argument("--port", type=int, default=None)
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    settings = get_settings()
    settings.require_api_key()

    if args.command == "serve":
        host = args.host or settings.HOST
        port = args.port or settings.PORT
        logger.info("HTTP service listening on %s:%s", host, port)
        uvicorn.run("main:app", host=host, port=port, log_level=settings.LOG_LEVEL.lower())
        return 0

    install_signal_handlers()
    client = build_client(settings)
    return run_chat(client, settings, model=getattr(args, "model", None))


if __name__ == "__main__":
    sys.exit(main())
