"""
Confirmation message generators for committed slots.

The OpenAI-backed generator writes a friendly text message; whenever it
cannot, it returns the fixed template built from the same slot.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional, Protocol

from ..domain.catalog import time_label
from ..domain.models import BookedSlot, weekday_label

logger = logging.getLogger(__name__)


def format_confirmation(slot: BookedSlot) -> str:
    """Deterministic confirmation text for a slot."""
    return (
        f"Your slot is on {slot.date.month}/{slot.date.day}({weekday_label(slot.date)}) "
        f"{time_label(slot.time_slot_id)} (computer {slot.resource_id})."
    )


class ConfirmationMessenger(Protocol):
    """Protocol for anything that turns a booked slot into a message."""

    async def generate(self, slot: BookedSlot) -> str:
        """Return a message for the slot. Must never raise."""


class TemplateMessenger:
    """Offline messenger returning the fixed template."""

    async def generate(self, slot: BookedSlot) -> str:
        return format_confirmation(slot)


class OpenAIMessenger:
    """
    Asks an OpenAI chat model to phrase the confirmation message.

    The model is told to follow the template exactly; the result is
    advisory text only and never decides whether a booking exists.
    """

    PROMPT = (
        "You are an assistant for the {school} school.\n"
        "Generate a text message exactly following the template below.\n\n"
        "Variables:\n"
        "- Date: {date}\n"
        "- Day: {day}\n"
        "- Time: {time}\n"
        "- Computer: {computer}\n\n"
        "Template:\n"
        "{template} Please keep the time in mind and let us know in advance "
        "if anything changes. Thank you.\n\n"
        "Instructions:\n"
        "- Output ONLY the message content.\n"
        "- Do not add any conversational text or markdown."
    )

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
        school_name: str = "Sesame Street",
        client: Any = None,
    ):
        """
        Initialize the messenger.

        Args:
            model: Chat model name
            api_key: OpenAI API key; read from OPENAI_API_KEY when omitted
            school_name: School name used in the prompt
            client: Optional pre-built async client (used by tests)
        """
        self.model = model
        self.school_name = school_name
        self._client = client
        if self._client is None:
            api_key = api_key or os.getenv("OPENAI_API_KEY")
            if api_key:
                from openai import AsyncOpenAI

                self._client = AsyncOpenAI(api_key=api_key)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def generate(self, slot: BookedSlot) -> str:
        fallback = format_confirmation(slot)

        if not self.enabled:
            logger.warning("No OpenAI API key configured, using template message")
            return fallback

        prompt = self.PROMPT.format(
            school=self.school_name,
            date=f"{slot.date.month}/{slot.date.day}",
            day=weekday_label(slot.date),
            time=time_label(slot.time_slot_id),
            computer=slot.resource_id,
            template=fallback,
        )

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
            text = (response.choices[0].message.content or "").strip()
        except Exception as exc:
            logger.error("Error generating confirmation message: %s", exc)
            return fallback

        if not text:
            logger.error("Confirmation message response contained no text")
            return fallback

        return text
