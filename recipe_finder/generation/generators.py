"""External recipe generation clients.

Each client turns a GenerationRequest into raw recipe payloads (plain dicts). They
raise on transport failures; validation of the payloads and all fallback
handling happen in the generation adapter.

Providers:
- gemini: google-genai SDK (sync client run in a worker thread)
- openrouter: OpenAI-compatible chat completions over aiohttp
"""

import asyncio
import json
import re
from typing import Any, Dict, List, Optional, Protocol

import aiohttp
from google import genai
from google.genai import types

from recipe_finder.generation.prompts import SYSTEM_PROMPT, build_recipe_generation_prompt
from recipe_finder.models.errors import GenerationUnavailableError
from recipe_finder.models.models import GenerationRequest
from recipe_finder.utils.config import Config
from recipe_finder.utils.logger import logger
from recipe_finder.utils.safe import safe_execute_sync

# Control characters, replacement char, CJK punctuation and fullwidth forms that
# models occasionally emit and json.loads rejects
_JUNK_CHARS = re.compile(r"[\x00-\x1f\x7f\ufffd\u3000-\u303f\uff00-\uffef]")


class RecipeGenerator(Protocol):
    """External generation capability."""

    async def generate(self, request: GenerationRequest) -> List[Dict[str, Any]]:
        """Return raw recipe payloads for the request. May raise on transport errors."""
        ...


def _clean_json_text(text: str) -> str:
    """Strip junk characters and cut the text down to the outermost JSON value."""
    cleaned = _JUNK_CHARS.sub("", text)
    start_brace, start_bracket = cleaned.find("{"), cleaned.find("[")
    if start_bracket >= 0 and (start_brace < 0 or start_bracket < start_brace):
        start, end = start_bracket, cleaned.rfind("]")
    else:
        start, end = start_brace, cleaned.rfind("}")
    if start >= 0 and end > start:
        return cleaned[start : end + 1]
    return cleaned


def _as_payload_list(parsed: Any) -> List[Dict[str, Any]]:
    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict) and isinstance(parsed.get("recipes"), list):
        items = parsed["recipes"]
    elif isinstance(parsed, dict):
        items = [parsed]
    else:
        return []
    return [item for item in items if isinstance(item, dict)]


def parse_generation_response(response_text: Optional[str]) -> List[Dict[str, Any]]:
    """Leniently parse model output into a list of recipe payloads.

    Accepts a JSON array of recipes, an object wrapping them in ``recipes``, or a
    single recipe object. Tries a direct parse first, then a parse of the cleaned
    and extracted JSON text. Returns [] if nothing parses.
    """
    if not response_text or not response_text.strip():
        return []

    def _parse_json_direct():
        return json.loads(response_text)

    def _parse_json_cleaned():
        return json.loads(_clean_json_text(response_text))

    parsed = safe_execute_sync(
        _parse_json_direct,
        "Direct JSON parse",
        log_level="debug",
        default_return=None,
    )

    if parsed is None:
        parsed = safe_execute_sync(
            _parse_json_cleaned,
            "Cleaned JSON parse",
            log_level="debug",
            default_return=None,
        )

    if parsed is None:
        logger.warning("Failed to parse JSON from generation response")
        return []

    return _as_payload_list(parsed)


class GeminiRecipeGenerator:
    """Recipe generation through the Gemini API."""

    def __init__(self, api_key: str, model: str, temperature: float = 0.7, max_output_tokens: int = 4096) -> None:
        self.client = genai.Client(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    async def generate(self, request: GenerationRequest) -> List[Dict[str, Any]]:
        prompt = build_recipe_generation_prompt(request)
        logger.debug(f"Gemini recipe generation request ({self.model}): {request.count} recipes")

        # The SDK client is synchronous; keep it off the event loop
        response = await asyncio.to_thread(
            self.client.models.generate_content,
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=SYSTEM_PROMPT,
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
                response_mime_type="application/json",
            ),
        )
        return parse_generation_response(response.text)


class OpenRouterRecipeGenerator:
    """Recipe generation through an OpenAI-compatible chat completions endpoint (OpenRouter)."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://openrouter.ai/api/v1",
        temperature: float = 0.7,
        max_output_tokens: int = 4096,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout_seconds = timeout_seconds

    def _build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_recipe_generation_prompt(request)},
            ],
            "max_tokens": self.max_output_tokens,
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }

    async def generate(self, request: GenerationRequest) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        logger.debug(f"OpenRouter recipe generation request ({self.model}): {request.count} recipes")

        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                json=self._build_payload(request),
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise GenerationUnavailableError(f"OpenRouter returned HTTP {response.status}: {body[:200]}")
                data = await response.json(content_type=None)

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            logger.warning("OpenRouter response contained no choices")
            return []
        content = (choices[0].get("message") or {}).get("content")
        return parse_generation_response(content)


def create_generator(config: Config) -> Optional[RecipeGenerator]:
    """Create the generator selected by GENERATION_PROVIDER, or None for "none"."""
    if config.GENERATION_PROVIDER == "gemini":
        return GeminiRecipeGenerator(
            api_key=config.GEMINI_API_KEY,
            model=config.GEMINI_MODEL,
            temperature=config.TEMPERATURE,
            max_output_tokens=config.MAX_OUTPUT_TOKENS,
        )
    if config.GENERATION_PROVIDER == "openrouter":
        return OpenRouterRecipeGenerator(
            api_key=config.OPENROUTER_API_KEY,
            model=config.OPENROUTER_MODEL,
            base_url=config.OPENROUTER_BASE_URL,
            temperature=config.TEMPERATURE,
            max_output_tokens=config.MAX_OUTPUT_TOKENS,
            timeout_seconds=config.GENERATION_TIMEOUT_SECONDS,
        )
    return None
