# conversation_engine/llm_fallback.py
"""
LLM Fallback

Optional generative text for free-form turns. The contract is small on
purpose:

    generate(prompt, context) -> str | None

None means "use the canned response". Missing API key, timeouts, SDK errors
and empty outputs all come back as None; nothing propagates to the session.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from openai import OpenAI

from .config import settings

logger = logging.getLogger("conversation_engine.llm")

SYSTEM_PROMPT = """
You are Kira, a friendly enrollment assistant for a coaching program.
Answer in two or three short sentences, warm and concrete.
Never invent prices, dates or links that are not given in the context.
""".strip()

UNAVAILABLE_MESSAGE = "I'm having trouble connecting to my brain right now. Please try again later."


class TextGenerator(Protocol):
    def generate(self, prompt: str, context: str = "") -> Optional[str]: ...


class OpenAITextGenerator:
    """
    Uses the OpenAI Responses API. Constructed without a key it is inert.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.LLM_FALLBACK_MODEL
        timeout = timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS

        if client is not None:
            self.client: Optional[OpenAI] = client
        elif api_key:
            self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            self.client = None

    @property
    def configured(self) -> bool:
        return self.client is not None

    def generate(self, prompt: str, context: str = "") -> Optional[str]:
        if self.client is None:
            return None

        user_content = f"Context:\n{context}\n\nUser: {prompt}" if context else prompt

        try:
            resp = self.client.responses.create(
                model=self.model,
                input=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_content},
                ],
            )
        except Exception as e:
            logger.warning(f"LLM fallback call failed: {e}")
            return None

        # The exact shape of resp depends on SDK version.
        try:
            text = resp.output[0].content[0].text  # type: ignore
        except Exception:
            text = getattr(resp, "output_text", None)

        if not text or not str(text).strip():
            return None
        return str(text).strip()
