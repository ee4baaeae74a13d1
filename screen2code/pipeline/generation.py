"""
LangChain-based generation pipeline turning a UI screenshot into HTML.
"""

import re
from datetime import datetime
from typing import Any, List, Optional

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from screen2code.config import Settings, get_settings
from screen2code.errors import (
    GenerationError,
    MissingCredentialError,
    MissingImageError,
)
from screen2code.io.upload_loader import UploadLoader
from screen2code.models import ConversionRequest, ConversionResult, ImageUpload
from screen2code.utils.llm_logger import LoggedLLM, content_to_text


SYSTEM_PROMPT = """You are an expert UI developer. Convert this screenshot into HTML/CSS that looks PIXEL-PERFECT - as close to the original as possible.

CRITICAL - Match the design EXACTLY:
1. COLORS: Extract exact hex codes from the image. Use background colors, text colors, border colors precisely. Don't approximate - #f3f4f6 is not the same as #f5f5f5.
2. TYPOGRAPHY: Match font families, sizes (px/rem), weights (400, 500, 600, 700), line heights. Add Google Fonts link if the design uses custom fonts.
3. SPACING: Replicate padding, margins, gaps exactly. Pay attention to the proportions between elements.
4. BORDERS & SHADOWS: Match border-radius, border widths, box-shadows, and any subtle depth effects.
5. LAYOUT: Preserve the exact structure - flex/grid alignments, element widths, heights. Center things that are centered.
6. CONTENT: Copy all visible text, labels, placeholders exactly as shown.
7. ICONS: Use heroicons, lucide, or similar CDN if icons are present. Match icon style and size.

TECHNICAL:
- Return ONLY the raw HTML code. No markdown, no ```html```, no explanation before or after.
- Use Tailwind CDN: <script src="https://cdn.tailwindcss.com"></script>
- For colors/spacing Tailwind can't match exactly, use inline style="" for precision.
- Include <meta name="viewport" content="width=device-width, initial-scale=1"> for proper scaling.
- Make the output a complete, self-contained HTML document that renders correctly."""


# Each pattern is applied at most once, at its own boundary
_OPENING_FENCE = re.compile(r"^```(?:html)?\s*\n?", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\n?```\s*$", re.IGNORECASE)


class ResponseParser:
    """Parses model responses into clean HTML."""

    @staticmethod
    def strip_fences(response_text: str) -> str:
        """
        Remove markdown code fences wrapping a response.

        The opening fence (optionally tagged ``html``) and the closing fence
        are removed independently, once each. Fences inside the document are
        left untouched.

        Args:
            response_text: Raw model response.

        Returns:
            HTML content.
        """
        html = (response_text or "").strip()
        html = _OPENING_FENCE.sub("", html, count=1)
        html = _CLOSING_FENCE.sub("", html, count=1)
        return html


class ScreenshotConverter:
    """Converts screenshots to HTML with a Gemini model."""

    provider = "google"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
        llm: Optional[Any] = None,
        loader: Optional[UploadLoader] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize the converter.

        Args:
            api_key: Gemini API key (optional, uses settings).
            model_name: Model name (optional, uses settings).
            temperature: Generation temperature (optional, model default).
            llm: Pre-built chat model; skips building ChatGoogleGenerativeAI.
            loader: UploadLoader used for validation and encoding.
            settings: Settings to read defaults from.
        """
        settings = settings or get_settings()
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model_name = model_name or settings.gemini_model
        self.temperature = temperature
        self.loader = loader or UploadLoader(max_bytes=settings.max_upload_bytes)
        self.parser = ResponseParser()
        self._llm = llm

    def _build_llm(self) -> Any:
        kwargs = {
            "model": self.model_name,
            "google_api_key": self.api_key,
            "max_retries": 0,
        }
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        return ChatGoogleGenerativeAI(**kwargs)

    def _create_messages(self, request: ConversionRequest) -> List:
        """
        Build the single multimodal message sent to the model.

        Args:
            request: Encoded screenshot and prompt.

        Returns:
            List with one HumanMessage: prompt text first, then the image.
        """
        content = [
            {"type": "text", "text": request.prompt},
            {"type": "image_url", "image_url": {"url": request.data_url}},
        ]
        return [HumanMessage(content=content)]

    def convert(
        self,
        upload: Optional[ImageUpload],
        request_id: Optional[str] = None
    ) -> ConversionResult:
        """
        Generate HTML from a screenshot.

        Args:
            upload: Screenshot to convert.
            request_id: Optional ID used to group debug logs.

        Returns:
            ConversionResult with fence-free HTML.
        """
        if upload is None:
            raise MissingImageError()

        self.loader.validate(upload)

        if not self.api_key:
            raise MissingCredentialError()

        request = self.loader.prepare_for_llm(upload, SYSTEM_PROMPT)
        messages = self._create_messages(request)

        if self._llm is None:
            self._llm = self._build_llm()
        llm = LoggedLLM(
            llm_instance=self._llm,
            component="converter",
            provider=self.provider,
            model=self.model_name,
            request_id=request_id,
            metadata={"media_type": upload.media_type, "image_bytes": upload.size},
        )

        try:
            response = llm.invoke(messages)
        except Exception as e:
            raise GenerationError(str(e)) from e

        if not hasattr(response, "content"):
            raise GenerationError(f"Unexpected response from {self.model_name}")

        html = self.parser.strip_fences(content_to_text(response.content))

        prompt_tokens = None
        completion_tokens = None
        usage = getattr(response, "usage_metadata", None)
        if usage:
            prompt_tokens = usage.get("input_tokens")
            completion_tokens = usage.get("output_tokens")

        return ConversionResult(
            html=html,
            model_name=self.model_name,
            generation_timestamp=datetime.now(),
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            generation_metadata={
                "provider": self.provider,
                "media_type": upload.media_type,
                "image_bytes": upload.size,
            }
        )
