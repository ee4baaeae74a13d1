"""
LLM Debug Logger for tracking generation API calls.

Supports configurable log levels (NONE, INFO, DEBUG, TRACE) and dual output:
- Console: Human-readable formatted output
- File: JSON Lines format for parsing and analysis

Inline image data never reaches either output; it is replaced with a summary
of its media type and encoded size.
"""

import json
import os
import time
import uuid
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv


class LogLevel(Enum):
    """Logging levels for LLM debug output."""

    NONE = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


def summarize_data_url(url: str) -> str:
    """Replace a base64 data URL with a short description of it."""
    header, _, payload = url.partition("base64,")
    media_type = header.replace("data:", "").rstrip(";") or "unknown"
    return f"[IMAGE_DATA: {media_type}, base64 encoded, {len(payload):,} bytes]"


def content_to_text(content: Any) -> str:
    """
    Flatten message content to plain text.

    Chat models return either a string or a list of content parts; only the
    text parts are kept.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and item.get("type") == "text":
                parts.append(item.get("text", ""))
        return "".join(parts)
    if content is None:
        return ""
    return str(content)


class LLMLogger:
    """Centralized logger for LLM API calls with configurable levels."""

    _instance: Optional["LLMLogger"] = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logger with configuration from environment."""
        if self._initialized:
            return

        load_dotenv()

        level_str = os.getenv("LLM_DEBUG_LEVEL", "NONE").upper()
        try:
            self.level = LogLevel[level_str]
        except KeyError:
            self.level = LogLevel.NONE

        self.log_to_file = os.getenv("LLM_LOG_TO_FILE", "true").lower() == "true"
        self.log_dir = Path(os.getenv("LLM_LOG_DIR", "outputs"))

        self._initialized = True

    def configure(
        self,
        level: Optional[LogLevel] = None,
        log_to_file: Optional[bool] = None,
        log_dir: Optional[Path] = None,
    ):
        """Override settings read from the environment."""
        if level is not None:
            self.level = level
        if log_to_file is not None:
            self.log_to_file = log_to_file
        if log_dir is not None:
            self.log_dir = Path(log_dir)

    def _should_log(self, min_level: LogLevel) -> bool:
        """Check if we should log at the given level."""
        return self.level.value >= min_level.value

    def _format_timestamp(self) -> str:
        """Get ISO8601 formatted timestamp."""
        return datetime.now().isoformat()

    def _truncate_content(self, content: str, max_len: int = 200) -> str:
        """Truncate content for preview."""
        if len(content) <= max_len:
            return content
        return content[:max_len] + "... [truncated]"

    def _strip_images(self, content: Any) -> Any:
        """Replace inline image parts of a message with summaries."""
        if isinstance(content, str):
            if content.startswith("data:image/") and "base64," in content:
                return summarize_data_url(content)
            return content

        if isinstance(content, list):
            stripped = []
            for item in content:
                if isinstance(item, dict) and item.get("type") == "image_url":
                    url = item.get("image_url", "")
                    if isinstance(url, dict):
                        url = url.get("url", "")
                    if "base64," in url:
                        stripped.append({"type": "text", "text": summarize_data_url(url)})
                    else:
                        stripped.append({"type": "text", "text": f"[IMAGE_URL: {url[:100]}]"})
                else:
                    stripped.append(item)
            return stripped

        return content

    def _serialize_message(self, msg: Any) -> Dict[str, Any]:
        """Serialize a message object to dict with images summarized."""
        content = getattr(msg, "content", msg)
        return {
            "type": msg.__class__.__name__,
            "content": self._strip_images(content),
        }

    def _format_console_messages(self, messages: List[Any], max_len: int) -> List[str]:
        lines = [f"  Messages: {len(messages)}"]
        for i, msg in enumerate(messages):
            serialized = self._serialize_message(msg)
            content = serialized["content"]
            if not isinstance(content, str):
                content = json.dumps(content, ensure_ascii=False)
            lines.append(f"    {i+1}. [{serialized['type']}] {self._truncate_content(content, max_len)}")
        return lines

    def _write_to_file(self, request_id: Optional[str], log_entry: Dict[str, Any]):
        """Write log entry to JSON Lines file."""
        if not self.log_to_file or not request_id:
            return

        log_file = self.log_dir / request_id / "logs" / "llm_calls.jsonl"
        log_file.parent.mkdir(parents=True, exist_ok=True)

        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(log_entry, ensure_ascii=False, default=str) + "\n")

    def log_invocation(
        self,
        component: str,
        provider: str,
        model: str,
        request_id: Optional[str] = None,
    ) -> str:
        """
        Log the start of an LLM invocation.

        Returns:
            Invocation ID (UUID string) for tracking this call, or an empty
            string when logging is disabled.
        """
        if not self._should_log(LogLevel.INFO):
            return ""

        invocation_id = str(uuid.uuid4())
        console_msg = f"[{self._format_timestamp()}] LLM Call: [{component}] {provider}/{model}"
        if request_id:
            console_msg += f" | request_id: {request_id}"
        print(console_msg)

        return invocation_id

    def log_request(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        messages: List[Any],
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log LLM request details."""
        if not self._should_log(LogLevel.DEBUG):
            return

        max_len = 500 if self.level == LogLevel.TRACE else 150
        print("\n".join(self._format_console_messages(messages, max_len)))

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "request",
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "request_id": request_id,
            "request": {
                "messages": (
                    [self._serialize_message(msg) for msg in messages]
                    if self.level == LogLevel.TRACE
                    else []
                ),
                "message_count": len(messages),
            },
            "metadata": metadata or {},
        }
        self._write_to_file(request_id, log_entry)

    def log_response(
        self,
        invocation_id: str,
        component: str,
        provider: str,
        model: str,
        response: Any,
        start_time: float,
        end_time: float,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Log LLM response with timing and token usage."""
        if not self._should_log(LogLevel.INFO):
            return

        latency_ms = (end_time - start_time) * 1000
        text = content_to_text(getattr(response, "content", response))

        usage = getattr(response, "usage_metadata", None) or {}
        token_usage = {
            "prompt_tokens": usage.get("input_tokens"),
            "completion_tokens": usage.get("output_tokens"),
            "total_tokens": usage.get("total_tokens"),
        }

        parts = [f"[{component}]", f"{provider}/{model}", f"{latency_ms:.1f}ms"]
        if token_usage["total_tokens"] is not None:
            parts.append(f"{token_usage['total_tokens']} tokens")
        print(f"[{self._format_timestamp()}] LLM Response: " + " | ".join(parts))

        if self._should_log(LogLevel.DEBUG):
            limit = 1000 if self.level == LogLevel.TRACE else 200
            print(f"  Response: {self._truncate_content(text, limit)}")

        log_entry = {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "response",
            "component": component,
            "invocation_id": invocation_id,
            "provider": provider,
            "model": model,
            "request_id": request_id,
            "response": {
                "content": text if self.level == LogLevel.TRACE else None,
                "content_preview": (
                    self._truncate_content(text, 200)
                    if self._should_log(LogLevel.DEBUG)
                    else None
                ),
                "content_length": len(text),
            },
            "timing": {
                "latency_ms": latency_ms,
                "start_time": datetime.fromtimestamp(start_time).isoformat(),
                "end_time": datetime.fromtimestamp(end_time).isoformat(),
            },
            "usage": token_usage if usage else None,
            "metadata": metadata or {},
        }
        self._write_to_file(request_id, log_entry)

    def log_error(
        self,
        invocation_id: str,
        component: str,
        error: Exception,
        request_id: Optional[str] = None,
    ):
        """Log a failed LLM call."""
        if not self._should_log(LogLevel.INFO):
            return

        print(f"[{self._format_timestamp()}] LLM Error: [{component}] {type(error).__name__}: {error}")
        self._write_to_file(request_id, {
            "timestamp": self._format_timestamp(),
            "level": self.level.name,
            "event": "error",
            "component": component,
            "invocation_id": invocation_id,
            "request_id": request_id,
            "error": {"type": type(error).__name__, "message": str(error)},
        })


def get_logger() -> LLMLogger:
    """Get the singleton logger instance."""
    return LLMLogger()


class LoggedLLM:
    """
    Wrapper around LangChain chat models to add debug logging.

    Intercepts invoke() calls and logs requests, responses, timing, and errors.
    """

    def __init__(
        self,
        llm_instance: Any,
        component: str,
        provider: str,
        model: str,
        request_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize LoggedLLM wrapper.

        Args:
            llm_instance: The actual chat model (e.g. ChatGoogleGenerativeAI)
            component: Component name (e.g., "converter")
            provider: Provider name ("google")
            model: Model name
            request_id: Optional ID used to group log files per request
            metadata: Optional additional metadata to include in logs
        """
        self.llm = llm_instance
        self.component = component
        self.provider = provider
        self.model = model
        self.request_id = request_id
        self.metadata = metadata or {}
        self.logger = get_logger()

    def __getattr__(self, name: str):
        """Delegate all other attributes to wrapped LLM instance."""
        return getattr(self.llm, name)

    def invoke(self, messages: List[Any], **kwargs) -> Any:
        """
        Invoke LLM with logging.

        Args:
            messages: List of message objects
            **kwargs: Additional arguments passed to LLM

        Returns:
            LLM response
        """
        invocation_id = self.logger.log_invocation(
            component=self.component,
            provider=self.provider,
            model=self.model,
            request_id=self.request_id,
        )

        if not invocation_id:
            return self.llm.invoke(messages, **kwargs)

        self.logger.log_request(
            invocation_id=invocation_id,
            component=self.component,
            provider=self.provider,
            model=self.model,
            messages=messages,
            request_id=self.request_id,
            metadata=self.metadata,
        )

        start_time = time.time()
        try:
            response = self.llm.invoke(messages, **kwargs)
        except Exception as e:
            self.logger.log_error(invocation_id, self.component, e, request_id=self.request_id)
            raise
        end_time = time.time()

        self.logger.log_response(
            invocation_id=invocation_id,
            component=self.component,
            provider=self.provider,
            model=self.model,
            response=response,
            start_time=start_time,
            end_time=end_time,
            request_id=self.request_id,
            metadata=self.metadata,
        )

        return response
