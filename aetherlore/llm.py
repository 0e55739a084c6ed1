"""Generation providers — one adapter per text-generation backend.

Every provider matches the protocol:

    async def generate(self, settings: AISettings, prompt: str) -> str: ...

`prompt` is the already-composed user prompt (see prompts.compose_prompt).
Each provider supplies the lore system instruction the way its backend
supports it, performs exactly one request and extracts the generated text.

    GeminiProvider   — google-genai SDK, system_instruction in the config block.
    NovelAIProvider  — POST https://api.novelai.net/ai/generate, bearer token,
                       system instruction prepended as a "[System: ...]" tag.
                       Response: {"output": "..."}
    LocalProvider    — POST {localBaseUrl}/chat/completions (OpenAI-compatible),
                       system instruction as a "system" role message.
                       Response: {"choices": [{"message": {"content": "..."}}]}

A successful response without text yields a fixed placeholder string.
Failures raise a GenerationError subclass carrying a user-facing message;
nothing is retried.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol

import httpx
from google import genai
from google.genai import types

from .models import AIProvider, AISettings
from .prompts import LORE_GENERATOR_SYSTEM_PROMPT, compose_prompt, with_system_tag

logger = logging.getLogger(__name__)

NOVELAI_URL = "https://api.novelai.net/ai/generate"
NOVELAI_MODEL = "kayra-v1"

# httpx's own 5 s default is far too short for text generation.
HTTP_TIMEOUT = 120.0

GEMINI_PLACEHOLDER = "No response generated."
NOVELAI_PLACEHOLDER = "No content returned from NovelAI."
LOCAL_PLACEHOLDER = "No content returned from local AI."


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class GenerationError(RuntimeError):
    """Base class for all provider failures. str(e) is shown to the user."""


class CredentialError(GenerationError):
    """A required API key is missing; raised before any network call."""


class TransportError(GenerationError):
    """Non-success HTTP status, connection failure or unreadable response."""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

class Provider(Protocol):
    name: str

    async def generate(self, settings: AISettings, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------

def gemini_api_key() -> str:
    return os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")


class GeminiProvider:
    name = "Gemini"

    def __init__(self, api_key: str | None = None) -> None:
        self._api_key = api_key

    async def generate(self, settings: AISettings, prompt: str) -> str:
        api_key = self._api_key if self._api_key is not None else gemini_api_key()
        if not api_key:
            raise CredentialError("Gemini API key is missing. Set GEMINI_API_KEY.")

        logger.debug("gemini call model=%s prompt_len=%d", settings.gemini_model_name, len(prompt))
        try:
            client = genai.Client(api_key=api_key)
            response = await client.aio.models.generate_content(
                model=settings.gemini_model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=LORE_GENERATOR_SYSTEM_PROMPT,
                    temperature=settings.temperature,
                    max_output_tokens=settings.max_tokens,
                ),
            )
            text = response.text
        except Exception as e:
            raise TransportError(f"Gemini API Error: {e}") from e

        logger.debug("gemini response len=%d", len(text or ""))
        return text or GEMINI_PLACEHOLDER


# ---------------------------------------------------------------------------
# NovelAI
# ---------------------------------------------------------------------------

class NovelAIProvider:
    name = "NovelAI"

    def _build_request(self, settings: AISettings, prompt: str) -> dict[str, Any]:
        return {
            "input": with_system_tag(prompt),
            "model": NOVELAI_MODEL,
            "parameters": {
                "use_string": True,
                "temperature": settings.temperature,
                "max_length": settings.max_tokens,
                "top_p": 0.9,
                "top_k": 40,
                "tail_free_sampling": 0.968,
                "repetition_penalty": 1.18,
                "repetition_penalty_range": 2048,
                "repetition_penalty_slope": 0.02,
            },
        }

    async def generate(self, settings: AISettings, prompt: str) -> str:
        if not settings.novel_ai_api_key:
            raise CredentialError("NovelAI API Key is missing in settings.")

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.novel_ai_api_key}",
        }
        body = self._build_request(settings, prompt)
        logger.debug("novelai call url=%s prompt_len=%d", NOVELAI_URL, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=HTTP_TIMEOUT) as client:
                resp = await client.post(NOVELAI_URL, json=body, headers=headers)
                resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                raise TransportError("Invalid NovelAI API Key.") from e
            raise TransportError(
                f"NovelAI Connection Failed: NovelAI API returned {status}: "
                f"{e.response.reason_phrase}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(f"NovelAI Connection Failed: {e}") from e

        output = data.get("output") if isinstance(data, dict) else None
        return output or NOVELAI_PLACEHOLDER


# ---------------------------------------------------------------------------
# Local OpenAI-compatible server (KoboldCpp, LM Studio, text-generation-webui)
# ---------------------------------------------------------------------------

class LocalProvider:
    name = "Local AI"

    def _build_request(self, settings: AISettings, prompt: str) -> tuple[str, dict[str, Any]]:
        url = f"{settings.local_base_url.rstrip('/')}/chat/completions"
        body = {
            "model": settings.local_model_name,
            "messages": [
                {"role": "system", "content": LORE_GENERATOR_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": settings.temperature,
            "max_tokens": settings.max_tokens,
            "stream": False,
        }
        return url, body

    def _parse_response(self, data: Any) -> str:
        try:
            return data["choices"][0]["message"]["content"] or LOCAL_PLACEHOLDER
        except (KeyError, IndexError, TypeError):
            return LOCAL_PLACEHOLDER

    async def generate(self, settings: AISettings, prompt: str) -> str:
        url, body = self._build_request(settings, prompt)
        logger.debug("local call url=%s prompt_len=%d", url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=HTTP_TIMEOUT) as client:
                resp = await client.post(url, json=body, headers={"Content-Type": "application/json"})
                resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                "Local AI Connection Failed. Ensure KoboldCPP/LMStudio is running. "
                f"Details: Local API returned {e.response.status_code}: {e.response.reason_phrase}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(
                f"Local AI Connection Failed. Ensure KoboldCPP/LMStudio is running. Details: {e}"
            ) from e

        text = self._parse_response(data)
        logger.debug("local response len=%d", len(text))
        return text


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

PROVIDERS: dict[AIProvider, Provider] = {
    AIProvider.GEMINI: GeminiProvider(),
    AIProvider.NOVELAI: NovelAIProvider(),
    AIProvider.LOCAL: LocalProvider(),
}


def get_provider(settings: AISettings, providers: dict[AIProvider, Provider] | None = None) -> Provider:
    return (providers or PROVIDERS)[settings.provider]


async def generate_lore(
    settings: AISettings,
    instruction: str,
    existing_content: str = "",
    providers: dict[AIProvider, Provider] | None = None,
) -> str:
    """Generate lore text for an instruction, continuing existing_content if non-empty."""
    prompt = compose_prompt(instruction, existing_content)
    return await get_provider(settings, providers).generate(settings, prompt)
