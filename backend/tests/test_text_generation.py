"""
Tests for the text-generation collaborator.

The Gemini SDK is patched at ``core.text_generation.genai``; no test
reaches the network.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest import mock

import pytest

from core.domain.exceptions import CollaboratorError
from core.text_generation import (
    GeminiTextGenerator,
    OfflineTextGenerator,
    get_text_generator,
)


class TestOfflineBackend:

    @pytest.mark.parametrize(
        "call",
        [
            lambda g: g.summarize("text"),
            lambda g: g.welcome_message("Sara", "Title"),
            lambda g: g.refine("draft", {}),
        ],
    )
    def test_every_call_raises(self, call):
        with pytest.raises(CollaboratorError):
            call(OfflineTextGenerator())


class TestGetTextGenerator:

    def test_builds_configured_backend(self):
        assert isinstance(get_text_generator(), OfflineTextGenerator)

    def test_timeout_passed_as_option(self, settings):
        settings.TEXT_GENERATION = {
            "BACKEND": "core.text_generation.OfflineTextGenerator",
            "OPTIONS": {"office_name": "Qanatar Office"},
            "TIMEOUT": 7,
        }
        generator = get_text_generator()
        assert generator.options == {"office_name": "Qanatar Office", "timeout": 7}

    def test_unknown_backend_is_a_collaborator_error(self, settings):
        settings.TEXT_GENERATION = {"BACKEND": "core.text_generation.DoesNotExist"}
        with pytest.raises(CollaboratorError):
            get_text_generator()

    def test_missing_api_key_is_a_collaborator_error(self, settings):
        settings.TEXT_GENERATION = {
            "BACKEND": "core.text_generation.GeminiTextGenerator",
            "OPTIONS": {"api_key": ""},
        }
        with pytest.raises(CollaboratorError):
            get_text_generator()


class TestGeminiBackend:

    @pytest.fixture()
    def genai(self):
        with mock.patch("core.text_generation.genai") as patched:
            yield patched

    def test_generation_uses_timeout_and_strips_text(self, genai):
        models = genai.Client.return_value.models
        models.generate_content.return_value = SimpleNamespace(text="  A short summary.  ")

        generator = GeminiTextGenerator(api_key="key", model="gemini-test", timeout=3)
        assert generator.summarize("Long complaint") == "A short summary."

        client_kwargs = genai.Client.call_args.kwargs
        assert client_kwargs["api_key"] == "key"
        assert client_kwargs["http_options"].timeout == 3000
        call = models.generate_content.call_args.kwargs
        assert call["model"] == "gemini-test"
        assert "Long complaint" in call["contents"]

    def test_refine_prompt_includes_context(self, genai):
        models = genai.Client.return_value.models
        models.generate_content.return_value = SimpleNamespace(text="Formal.")

        generator = GeminiTextGenerator(api_key="key", office_name="Qanatar Office")
        generator.refine(
            "fixing tomorrow",
            {"citizen_name": "Mona", "complaint_title": "Water cut", "complaint_description": "No water"},
        )

        prompt = models.generate_content.call_args.kwargs["contents"]
        for fragment in ("Qanatar Office", "Mona", "Water cut", "No water", "fixing tomorrow"):
            assert fragment in prompt

    def test_client_error_becomes_collaborator_error(self, genai):
        genai.Client.return_value.models.generate_content.side_effect = TimeoutError("deadline")

        generator = GeminiTextGenerator(api_key="key")
        with pytest.raises(CollaboratorError):
            generator.welcome_message("Sara", "Title")

    def test_empty_response_becomes_collaborator_error(self, genai):
        genai.Client.return_value.models.generate_content.return_value = SimpleNamespace(text="")

        generator = GeminiTextGenerator(api_key="key")
        with pytest.raises(CollaboratorError):
            generator.summarize("text")

    def test_configured_backend_is_built_once(self, genai, settings):
        settings.TEXT_GENERATION = {
            "BACKEND": "core.text_generation.GeminiTextGenerator",
            "OPTIONS": {"api_key": "key"},
        }

        first = get_text_generator()
        assert get_text_generator() is first
        assert genai.Client.call_count == 1

        settings.TEXT_GENERATION = {"BACKEND": "core.text_generation.OfflineTextGenerator"}
        assert isinstance(get_text_generator(), OfflineTextGenerator)
