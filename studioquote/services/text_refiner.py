from __future__ import annotations

import sys
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from studioquote.server.settings.config import settings

MISSING_KEY_MESSAGE = "API key missing. Please configure."

PROMPT_TEMPLATE = """You are a professional copywriter for a high-end wedding photography studio called '{studio}'.

Refine the following text which is used in a quotation for the section: "{context}".
Make it sound professional, polite, and clear. Maintain a premium tone.
Do not add markdown formatting or quotes around the output.

Text to refine:
{text}"""


class TextRefiner:
    """
    Rewrites quotation copy (terms, deliverables, notes ...) through the
    OpenAI chat API.

    Never raises on provider trouble: the caller gets its own text back and
    the error goes to stderr.
    """

    def __init__(
        self,
        *,
        client: Any = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        studio_name: Optional[str] = None,
    ) -> None:
        key = api_key if api_key is not None else settings.openai_api_key
        self.model = model or settings.refine_model
        self.studio_name = studio_name or settings.studio_name

        if client is not None:
            self.client = client
        elif key:
            self.client = OpenAI(api_key=key)
        else:
            self.client = None

    @property
    def configured(self) -> bool:
        return self.client is not None

    def build_prompt(self, text: str, context: str) -> str:
        return PROMPT_TEMPLATE.format(studio=self.studio_name, context=context, text=text)

    def refine(self, text: str, context: str) -> str:
        if not self.configured:
            print("[text_refiner] No OPENAI_API_KEY configured.", file=sys.stderr)
            return MISSING_KEY_MESSAGE

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=0.4,
                messages=[{"role": "user", "content": self.build_prompt(text, context)}],
            )
            raw = response.choices[0].message.content
        except (OpenAIError, IndexError, AttributeError) as e:
            print(f"[text_refiner] Refinement failed: {e}", file=sys.stderr)
            return text

        # Some client versions hand back content parts instead of a string
        if isinstance(raw, list):
            raw = "".join(
                str(part.get("text", "")) if isinstance(part, dict) else str(part)
                for part in raw
            )

        refined = (raw or "").strip()
        return refined or text


def refine_text(text: str, context: str, *, refiner: Optional[TextRefiner] = None) -> str:
    return (refiner or TextRefiner()).refine(text, context)
