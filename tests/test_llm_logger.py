"""
Tests for the LLM debug logger.
"""

import json

import pytest

from conftest import FakeChatModel
from screen2code.config import Settings
from screen2code.pipeline.generation import ScreenshotConverter
from screen2code.utils.llm_logger import (
    LoggedLLM,
    LogLevel,
    content_to_text,
    get_logger,
    summarize_data_url,
)


@pytest.fixture
def llm_logger(tmp_path):
    """Singleton logger pointed at a temp dir, restored afterwards."""
    logger = get_logger()
    saved = (logger.level, logger.log_to_file, logger.log_dir)
    logger.configure(level=LogLevel.TRACE, log_to_file=True, log_dir=tmp_path)
    yield logger
    logger.level, logger.log_to_file, logger.log_dir = saved


def read_entries(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_logger_is_singleton():
    assert get_logger() is get_logger()


def test_summarize_data_url():
    summary = summarize_data_url("data:image/png;base64,QUJDRA==")
    assert summary == "[IMAGE_DATA: image/png, base64 encoded, 8 bytes]"


def test_content_to_text():
    assert content_to_text("plain") == "plain"
    assert content_to_text([{"type": "text", "text": "a"}, "b", {"type": "image_url"}]) == "ab"
    assert content_to_text(None) == ""


def test_disabled_logging_calls_through(tmp_path):
    logger = get_logger()
    saved = logger.level
    logger.configure(level=LogLevel.NONE)
    try:
        llm = FakeChatModel(content="hi")
        wrapped = LoggedLLM(llm, component="converter", provider="google", model="m", request_id="r1")

        assert wrapped.invoke(["msg"]).content == "hi"
        assert llm.calls == [["msg"]]
    finally:
        logger.level = saved


def test_trace_log_file_hides_image_data(llm_logger, tmp_path, png_upload):
    llm = FakeChatModel(content="```html\n<p>x</p>\n```")
    converter = ScreenshotConverter(settings=Settings(gemini_api_key="k"), llm=llm)

    converter.convert(png_upload, request_id="req42")

    log_file = tmp_path / "req42" / "logs" / "llm_calls.jsonl"
    entries = read_entries(log_file)
    assert [entry["event"] for entry in entries] == ["request", "response"]

    raw = log_file.read_text(encoding="utf-8")
    assert "base64 encoded" in raw
    assert converter.loader.prepare_for_llm(png_upload, "").image_base64 not in raw

    response = entries[1]["response"]
    assert response["content"] == "```html\n<p>x</p>\n```"
    assert entries[1]["model"] == "gemini-2.5-flash"


def test_errors_are_logged_and_reraised(llm_logger, tmp_path):
    llm = FakeChatModel(error=RuntimeError("quota"))
    wrapped = LoggedLLM(llm, component="converter", provider="google", model="m", request_id="bad")

    with pytest.raises(RuntimeError):
        wrapped.invoke(["msg"])

    entries = read_entries(tmp_path / "bad" / "logs" / "llm_calls.jsonl")
    assert entries[-1]["event"] == "error"
    assert entries[-1]["error"] == {"type": "RuntimeError", "message": "quota"}


def test_no_file_without_request_id(llm_logger, tmp_path):
    wrapped = LoggedLLM(FakeChatModel(), component="converter", provider="google", model="m")
    wrapped.invoke(["msg"])
    assert list(tmp_path.iterdir()) == []
