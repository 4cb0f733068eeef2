from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from urllib import error, parse, request
logger = logging.getLogger(__name__)
class GeminiError(Exception):
    """Raised when the Gemini API cannot return a completion."""
@dataclass
class GeminiClient:
    api_key: str
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-pro"
    temperature: float | None = 0.4
    max_output_tokens: int | None = 2048
    timeout: float = 60.0
    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "gemini-pro"
    def _url(self, path: str) -> str:
        query = parse.urlencode({"key": self.api_key})
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}?{query}"
    def generate_content(
        self,
        prompt: str | None = None,
        *,
        contents: list[dict] | None = None,
        system_instruction: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> str:
        if not self.api_key:
            raise GeminiError("API Key erforderlich.")
        if contents is None:
            if not prompt or not prompt.strip():
                raise GeminiError("Prompt is empty; fill in the project form first.")
            payload_contents = [{"parts": [{"text": prompt}]}]
        else:
            if not contents:
                raise GeminiError("Message history is empty; provide at least one message.")
            payload_contents = contents
        payload_body: dict = {"contents": payload_contents}
        if system_instruction:
            payload_body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        generation_config: dict = {}
        payload_temperature = temperature if temperature is not None else self.temperature
        if payload_temperature is not None:
            generation_config["temperature"] = float(payload_temperature)
        payload_max_tokens = max_output_tokens if max_output_tokens is not None else self.max_output_tokens
        if payload_max_tokens is not None:
            generation_config["maxOutputTokens"] = int(payload_max_tokens)
        if generation_config:
            payload_body["generationConfig"] = generation_config
        path = f"models/{parse.quote(self.model, safe='')}:generateContent"
        url = self._url(path)
        logger.debug("Gemini request: model=%s payload=%s", self.model, payload_body)
        req = request.Request(
            url,
            data=json.dumps(payload_body).encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )
        try:
            with request.urlopen(req, timeout=self.timeout) as resp:  # nosec: B310
                body = resp.read().decode("utf-8")
        except error.HTTPError as exc:
            detail = self._safe_read_error_message(exc)
            raise GeminiError(detail or f"Gemini request failed ({exc.code}): {exc.reason}") from exc
        except error.URLError as exc:  # pragma: no cover - network
            raise GeminiError(f"Gemini connection error: {exc.reason}") from exc
        logger.debug("Gemini response body: %s", body)
        return self._extract_content(body)
    def validate_key(self) -> bool:
        if not self.api_key:
            return False
        req = request.Request(self._url("models"), method="GET")
        try:
            with request.urlopen(req, timeout=self.timeout) as resp:  # nosec: B310
                return 200 <= resp.status < 300
        except error.HTTPError as exc:
            logger.info("Gemini key validation rejected (%s)", exc.code)
            return False
        except (error.URLError, OSError) as exc:
            logger.warning("Gemini key validation failed: %s", exc)
            return False
    @staticmethod
    def _extract_content(body: str) -> str:
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise GeminiError("Invalid API response format") from exc
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GeminiError("Invalid API response format") from exc
        if not isinstance(text, str) or not text:
            raise GeminiError("Invalid API response format")
        return text
    @staticmethod
    def _safe_read_error_message(exc: error.HTTPError) -> str:
        try:
            raw = exc.read()
        except Exception:
            return ""
        if not raw:
            return ""
        decoded = raw.decode("utf-8", errors="ignore").strip()
        try:
            data = json.loads(decoded)
        except json.JSONDecodeError:
            return decoded[:500]
        err = data.get("error") if isinstance(data, dict) else None
        message = err.get("message") if isinstance(err, dict) else None
        return str(message) if message else decoded[:500]
