"""
core.text_generation — Text-generation collaborator.

Wraps the external language model used to draft the welcome message on
new complaints, summarise complaints for staff, and polish staff replies
into a formal tone.

Every backend either returns usable text or raises ``CollaboratorError``.
Callers own the fallback; ``SUMMARY_FALLBACK`` and ``WELCOME_FALLBACK``
are the strings they substitute.  Refinement falls back to the draft.

Configuration (``settings.TEXT_GENERATION``)::

    TEXT_GENERATION = {
        "BACKEND": "core.text_generation.GeminiTextGenerator",
        "OPTIONS": {"api_key": "...", "model": "gemini-2.0-flash", "office_name": "..."},
        "TIMEOUT": 15,
    }
"""

from __future__ import annotations

import functools
import logging
from typing import Any

from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.module_loading import import_string
from google import genai
from google.genai import types

from core.domain.exceptions import CollaboratorError

logger = logging.getLogger(__name__)

SUMMARY_FALLBACK = "Automatic summary is unavailable right now."
WELCOME_FALLBACK = (
    "Thank you for contacting the office. Your complaint has been received."
)

DEFAULT_TIMEOUT = 15.0


class TextGenerator:
    """Interface implemented by every text-generation backend."""

    def summarize(self, text: str) -> str:
        raise NotImplementedError

    def welcome_message(self, name: str, title: str) -> str:
        raise NotImplementedError

    def refine(self, draft: str, context: dict[str, str]) -> str:
        raise NotImplementedError


class OfflineTextGenerator(TextGenerator):
    """
    Backend used when no model is configured.

    Every call raises ``CollaboratorError`` so the callers' fallbacks
    are exercised deterministically.
    """

    def __init__(self, **options: Any) -> None:
        self.options = options

    def _unavailable(self) -> str:
        raise CollaboratorError("No text-generation backend is configured.")

    def summarize(self, text: str) -> str:
        return self._unavailable()

    def welcome_message(self, name: str, title: str) -> str:
        return self._unavailable()

    def refine(self, draft: str, context: dict[str, str]) -> str:
        return self._unavailable()


class GeminiTextGenerator(TextGenerator):
    """
    Google Gemini backend.

    Parameters
    ----------
    api_key : str
        Gemini API key.
    model : str
        Model id, e.g. ``"gemini-2.0-flash"``.
    office_name : str
        Name the assistant writes on behalf of.
    timeout : float
        Seconds to wait for one generation before giving up.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "gemini-2.0-flash",
        office_name: str = "the office",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not api_key:
            raise CollaboratorError("Gemini API key is missing.")
        self.model_id = model
        self.office_name = office_name
        self.timeout = timeout
        # HttpOptions.timeout is in milliseconds.
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

    def _generate(self, prompt: str) -> str:
        try:
            response = self._client.models.generate_content(
                model=self.model_id,
                contents=prompt,
            )
            text = str(getattr(response, "text", "") or "").strip()
        except Exception as exc:
            raise CollaboratorError(f"Gemini error: {exc}") from exc
        if not text:
            raise CollaboratorError("Gemini returned an empty response.")
        return text

    def summarize(self, text: str) -> str:
        return self._generate(
            f"You are a technical assistant in the office of {self.office_name}. "
            "Summarise this complaint in one short, direct sentence that states "
            "what the citizen is asking for.\n\n"
            f"Complaint: {text}"
        )

    def welcome_message(self, name: str, title: str) -> str:
        return self._generate(
            f"Write a short, warm acknowledgement on behalf of {self.office_name} "
            f"to the citizen {name}, confirming that their complaint titled "
            f"'{title}' was received and will be reviewed by the responsible team. "
            "Two sentences at most."
        )

    def refine(self, draft: str, context: dict[str, str]) -> str:
        return self._generate(
            f"As the official assistant of {self.office_name}, turn the staff "
            "draft below into a very brief, formal final reply. Address the "
            f"citizen {context.get('citizen_name', '')} about "
            f"'{context.get('complaint_title', '')}', keep only the essential "
            "information and close politely.\n\n"
            f"Complaint details: {context.get('complaint_description', '')}\n"
            f"Staff draft: {draft}"
        )


@functools.lru_cache(maxsize=None)
def get_text_generator() -> TextGenerator:
    """
    Return the backend named in ``settings.TEXT_GENERATION``.

    The instance is built once per process and rebuilt after the
    setting changes.  Failed builds are not cached.

    Raises:
        CollaboratorError: The backend cannot be imported or constructed.
    """
    config = getattr(settings, "TEXT_GENERATION", {})
    backend_path = config.get("BACKEND", "core.text_generation.OfflineTextGenerator")
    options = dict(config.get("OPTIONS", {}))
    options.setdefault("timeout", config.get("TIMEOUT", DEFAULT_TIMEOUT))
    try:
        backend_cls = import_string(backend_path)
        return backend_cls(**options)
    except CollaboratorError:
        raise
    except Exception as exc:
        logger.warning("Cannot build text generator %s: %s", backend_path, exc)
        raise CollaboratorError(f"Cannot build text generator: {exc}") from exc


@receiver(setting_changed)
def reset_text_generator(*, setting: str, **kwargs: Any) -> None:
    if setting == "TEXT_GENERATION":
        get_text_generator.cache_clear()
