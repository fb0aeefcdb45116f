# archeval/llm/multi_model_client.py

import os
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from openai import OpenAI
import google.generativeai as genai

from archeval.config import (
    GEMINI_MODEL,
    OPENAI_MODEL,
)
from archeval.prompts.system_prompts import ARCHITECT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class MultiModelLLMClient:
    """
    Text generation over Gemini with OpenAI as fallback.

    Order: Gemini, then OpenAI. A provider is only tried when its key
    was present at construction. An error from Gemini moves on to OpenAI;
    an error from the last configured provider propagates to the caller.
    RuntimeError means no provider is configured at all.

    json_mode asks the provider for a bare JSON object
    (Gemini response_mime_type, OpenAI response_format).
    """

    def __init__(self):

        self.gemini_model = None
        self.openai: Optional[OpenAI] = None

        self._calls: Dict[str, int] = {"gemini": 0, "openai": 0}

        self.gemini_available = self._init_gemini()
        self.openai_available = self._init_openai()

        logger.info("LLM providers ready", extra=self.get_usage_stats())

    # ============================================================
    # INITIALIZATION
    # ============================================================

    def _init_gemini(self) -> bool:

        key = os.getenv("GEMINI_API_KEY")

        if not key:
            logger.warning("GEMINI_API_KEY not set, Gemini disabled")
            return False

        try:
            genai.configure(api_key=key)
            self.gemini_model = genai.GenerativeModel(model_name=GEMINI_MODEL)
        except Exception as e:
            logger.error("Gemini initialization failed", extra={"error": str(e)})
            return False

        logger.info("Gemini ready", extra={"model": GEMINI_MODEL})
        return True

    def _init_openai(self) -> bool:

        key = os.getenv("OPENAI_API_KEY")

        # Project and user keys both start with sk-
        if not key or not key.startswith("sk-"):
            logger.warning("OPENAI_API_KEY missing or malformed, OpenAI disabled")
            return False

        try:
            self.openai = OpenAI(api_key=key)
        except Exception as e:
            logger.error("OpenAI initialization failed", extra={"error": str(e)})
            return False

        logger.info("OpenAI ready", extra={"model": OPENAI_MODEL})
        return True

    # ============================================================
    # PUBLIC API
    # ============================================================

    @property
    def available(self) -> bool:
        return self.gemini_available or self.openai_available

    def _providers(self) -> List[Tuple[str, Callable[..., str]]]:

        providers = []

        if self.gemini_available:
            providers.append(("gemini", self._generate_gemini))

        if self.openai_available:
            providers.append(("openai", self._generate_openai))

        return providers

    def generate(
        self,
        prompt: str,
        system_prompt: str = ARCHITECT_SYSTEM_PROMPT,
        temperature: float = 0.7,
        max_tokens: int = 600,
        json_mode: bool = False,
    ) -> str:

        providers = self._providers()

        if not providers:
            raise RuntimeError("No LLM backend available")

        *fallible, (last_name, last_fn) = providers

        args = (prompt, system_prompt, temperature, max_tokens, json_mode)

        for name, fn in fallible:

            try:
                return self._timed_call(name, lambda: fn(*args))
            except Exception as e:
                logger.warning(
                    "LLM provider failed, falling back",
                    extra={"provider": name, "error": str(e)},
                )

        return self._timed_call(last_name, lambda: last_fn(*args))

    # ============================================================
    # PROVIDERS
    # ============================================================

    def _generate_gemini(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:

        generation_config = genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            response_mime_type="application/json" if json_mode else "text/plain",
        )

        response = self.gemini_model.generate_content(
            f"{system_prompt.strip()}\n\n{prompt}",
            generation_config=generation_config,
        )

        return (response.text or "").strip() if response else ""

    def _generate_openai(
        self,
        prompt: str,
        system_prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:

        extra = {"response_format": {"type": "json_object"}} if json_mode else {}

        response = self.openai.chat.completions.create(
            model=OPENAI_MODEL,
            messages=[
                {"role": "system", "content": system_prompt.strip()},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            **extra,
        )

        return (response.choices[0].message.content or "").strip()

    # ============================================================
    # LATENCY OBSERVABILITY
    # ============================================================

    def _timed_call(self, provider: str, fn: Callable[[], str]) -> str:

        start = time.time()

        result = fn()

        self._calls[provider] += 1

        logger.info(
            "LLM provider success",
            extra={
                "provider": provider,
                "latency_seconds": round(time.time() - start, 3),
                "response_length": len(result),
            },
        )

        return result

    def get_usage_stats(self) -> Dict:

        stats = {
            "gemini_available": self.gemini_available,
            "openai_available": self.openai_available,
        }

        for provider, count in self._calls.items():
            stats[f"{provider}_calls"] = count

        return stats
