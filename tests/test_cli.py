import io

import pytest

from cli import Ansi, build_parser, run_chat
from conftest import make_response
from settings import Settings


@pytest.fixture(autouse=True)
def no_color(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")


def test_chat_loop_keeps_context(fake, settings):
    fake.response = make_response("Namaste.")
    stdin = io.StringIO("hello\n\nwho are you?\nEXIT\n")
    stdout = io.StringIO()

    assert run_chat(fake, settings, stdin=stdin, stdout=stdout) == 0

    out = stdout.getvalue()
    assert "Gemini Chat" in out
    assert out.count("Namaste.") == 2
    assert "Goodbye!" in out
    # blank line is ignored; second call carries the first exchange
    assert len(fake.calls) == 2
    roles = [c.role for c in fake.calls[1]["contents"]]
    assert roles == ["user", "model", "user"]


def test_chat_loop_reports_errors_and_continues(fake, settings):
    fake.error = RuntimeError("network down")
    stdin = io.StringIO("hello\nexit\n")
    stdout = io.StringIO()

    assert run_chat(fake, settings, stdin=stdin, stdout=stdout) == 0
    assert "Error: network down" in stdout.getvalue()


def test_chat_loop_surfaces_empty_reply(fake, settings):
    fake.response = make_response()
    stdout = io.StringIO()
    run_chat(fake, settings, stdin=io.StringIO("hi\n"), stdout=stdout)
    assert "(empty model reply)" in stdout.getvalue()


def test_chat_loop_ends_on_eof(fake, settings):
    stdout = io.StringIO()
    assert run_chat(fake, settings, stdin=io.StringIO(""), stdout=stdout) == 0
    assert fake.calls == []


def test_chat_model_override(fake, settings):
    run_chat(fake, settings, model="gemini-2.5-pro", stdin=io.StringIO("hi\nexit\n"), stdout=io.StringIO())
    assert fake.calls[0]["model"] == "gemini-2.5-pro"


def test_missing_api_key_is_fatal():
    with pytest.raises(SystemExit) as exc:
        Settings(API_KEY="").require_api_key()
    assert exc.value.code == 1


def test_ansi_style_respects_no_color(monkeypatch):
    assert Ansi.style("x", Ansi.BOLD) == "x"
    monkeypatch.delenv("NO_COLOR")
    assert Ansi.style("x", Ansi.BOLD) == "\033[1mx\033[0m"


def test_parser_defaults_to_chat():
    args = build_parser().parse_args([])
    assert args.command is None
    args = build_parser().parse_args(["serve", "--port", "9000"])
    assert (args.command, args.port) == ("serve", 9000)
