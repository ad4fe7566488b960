# swiftloan/services/gemini_client.py
import base64
import logging
from typing import Any, Dict, List, Optional

import google.generativeai as genai

from swiftloan.core.config import settings
from swiftloan.core.errors import ModelConfigurationError, ModelTransportError
from swiftloan.models.domain_models import ContentEntry, ModelRequest, ModelResponse, ToolInvocation

logger = logging.getLogger(__name__)


def _to_sdk_contents(contents: List[ContentEntry]) -> List[Dict[str, Any]]:
    sdk_contents = []
    for entry in contents:
        parts: List[Dict[str, Any]] = []
        for part in entry.parts:
            if part.text is not None:
                parts.append({"text": part.text})
            if part.inline_data is not None:
                parts.append({
                    "inline_data": {
                        "mime_type": part.inline_data.mime_type,
                        "data": base64.b64decode(part.inline_data.data),
                    }
                })
        sdk_contents.append({"role": entry.role, "parts": parts})
    return sdk_contents


def _plain(value: Any) -> Any:
    # function-call args arrive as proto map/list composites
    if hasattr(value, "items"):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)) or type(value).__name__ == "RepeatedComposite":
        return [_plain(v) for v in value]
    return value


def parse_response(response: Any) -> ModelResponse:
    """Collect text parts and function calls from the first candidate."""
    texts: List[str] = []
    calls: List[ToolInvocation] = []

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            fn = getattr(part, "function_call", None)
            if fn is not None and getattr(fn, "name", ""):
                calls.append(ToolInvocation(name=fn.name, args=_plain(fn.args or {})))
            text = getattr(part, "text", None)
            if text:
                texts.append(text)

    return ModelResponse(text="".join(texts), tool_calls=calls)


class GeminiClient:
    """Transport to the Gemini API. One awaited call per turn."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self._api_key = api_key
        self._model_name = model_name

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key or settings.GOOGLE_API_KEY

    @property
    def model_name(self) -> str:
        return self._model_name or settings.GOOGLE_MODEL

    async def generate(self, request: ModelRequest) -> ModelResponse:
        if not self.api_key:
            raise ModelConfigurationError("GOOGLE_API_KEY is not configured")

        genai.configure(api_key=self.api_key)
        try:
            model = genai.GenerativeModel(
                self.model_name,
                system_instruction=request.system_instruction,
                tools=[{"function_declarations": request.tools}],
                generation_config={"temperature": request.temperature},
            )
            response = await model.generate_content_async(_to_sdk_contents(request.contents))
        except Exception as exc:
            logger.warning("gemini call failed: model=%s error=%s", self.model_name, exc)
            raise ModelTransportError(str(exc)) from exc

        parsed = parse_response(response)
        logger.info(
            "gemini: model=%s text_len=%d tool_calls=%s",
            self.model_name, len(parsed.text), [c.name for c in parsed.tool_calls],
        )
        return parsed
