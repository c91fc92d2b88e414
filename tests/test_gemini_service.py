"""Tests for GeminiService request shaping and response parsing."""

import json

import pytest

from app.config import settings
from app.exceptions import ConfigurationError, GenerationError
from app.models.schemas import DesignCategory
from app.services.gemini_service import GeminiService, parse_advice
from app.services.prompts import CATEGORY_VARIATIONS, DECLUTTER_PROMPT, DEFAULT_VARIATIONS
from conftest import FakeClient, image_response, text_response


def _advice_json(n=4):
    return json.dumps({
        "advice": [
            {"title": f"Title {i}", "description": f"Description {i}", "principleSource": "Domino: Flow"}
            for i in range(n)
        ]
    })


class TestConfiguration:

    def test_missing_api_key_raises_configuration_error(self, monkeypatch):
        monkeypatch.setattr(settings, "gemini_api_key", "")
        with pytest.raises(ConfigurationError):
            GeminiService()

    def test_injected_client_skips_key_check(self, monkeypatch):
        monkeypatch.setattr(settings, "gemini_api_key", "")
        client = FakeClient(lambda **_: image_response())
        assert GeminiService(client=client).client is client


class TestDeclutter:

    @pytest.mark.asyncio
    async def test_returns_first_image_part(self, room_image):
        client = FakeClient(lambda **_: image_response(b"tidy", "image/png"))
        cleaned = await GeminiService(client=client).declutter_image(room_image)

        assert cleaned.data == b"tidy"
        assert cleaned.mime_type == "image/png"
        call = client.models.calls[0]
        assert call["model"] == settings.clean_model
        assert call["contents"][1] == DECLUTTER_PROMPT

    @pytest.mark.asyncio
    async def test_text_only_response_is_generation_error(self, room_image):
        client = FakeClient(lambda **_: text_response("I cannot edit images"))
        with pytest.raises(GenerationError):
            await GeminiService(client=client).declutter_image(room_image)

    @pytest.mark.asyncio
    async def test_empty_candidates_is_generation_error(self, room_image):
        from types import SimpleNamespace
        client = FakeClient(lambda **_: SimpleNamespace(candidates=[], text=None))
        with pytest.raises(GenerationError):
            await GeminiService(client=client).declutter_image(room_image)

    @pytest.mark.asyncio
    async def test_remote_error_is_wrapped(self, room_image):
        def boom(**_):
            raise RuntimeError("503 unavailable")

        with pytest.raises(GenerationError, match="503"):
            await GeminiService(client=FakeClient(boom)).declutter_image(room_image)


class TestAnalyze:

    @pytest.mark.asyncio
    async def test_four_items_parsed(self, room_image):
        client = FakeClient(lambda **_: text_response(_advice_json(4)))
        advice = await GeminiService(client=client).analyze_room_design(room_image, DesignCategory.LAYOUT)

        assert len(advice) == 4
        for item in advice:
            assert item.title and item.description and item.principle_source

    @pytest.mark.asyncio
    async def test_request_uses_json_mode_and_system_instruction(self, room_image):
        client = FakeClient(lambda **_: text_response(_advice_json()))
        await GeminiService(client=client).analyze_room_design(room_image, DesignCategory.TEXTURES)

        call = client.models.calls[0]
        assert call["model"] == settings.analysis_model
        assert '"Textures & Fabrics"' in call["contents"][1]
        assert call["config"].response_mime_type == "application/json"
        assert "Frida Ramstedt" in str(call["config"].system_instruction)
        assert "10. Vogue Living" in str(call["config"].system_instruction)

    @pytest.mark.asyncio
    async def test_missing_advice_field_gives_empty_list(self, room_image):
        client = FakeClient(lambda **_: text_response('{"tips": []}'))
        assert await GeminiService(client=client).analyze_room_design(room_image, DesignCategory.DECOR) == []

    @pytest.mark.asyncio
    async def test_malformed_json_gives_empty_list(self, room_image):
        client = FakeClient(lambda **_: text_response("{not json"))
        assert await GeminiService(client=client).analyze_room_design(room_image, DesignCategory.DECOR) == []

    @pytest.mark.asyncio
    async def test_malformed_json_strict_mode_raises(self, room_image, monkeypatch):
        monkeypatch.setattr(settings, "strict_advice_parsing", True)
        client = FakeClient(lambda **_: text_response("{not json"))
        with pytest.raises(GenerationError):
            await GeminiService(client=client).analyze_room_design(room_image, DesignCategory.DECOR)

    @pytest.mark.asyncio
    async def test_remote_error_is_wrapped(self, room_image):
        def boom(**_):
            raise RuntimeError("quota exceeded")

        with pytest.raises(GenerationError):
            await GeminiService(client=FakeClient(boom)).analyze_room_design(room_image, DesignCategory.LIGHTING)


class TestParseAdvice:

    def test_none_text_is_empty(self):
        assert parse_advice(None) == []

    def test_code_fence_is_stripped(self):
        advice = parse_advice("```json\n" + _advice_json(2) + "\n```")
        assert [a.title for a in advice] == ["Title 0", "Title 1"]

    def test_non_list_advice_is_empty(self):
        assert parse_advice('{"advice": "be tidy"}') == []

    def test_incomplete_items_are_skipped(self):
        text = json.dumps({"advice": [
            {"title": "Keep", "description": "ok", "principleSource": "Homebody"},
            {"title": "No source", "description": "missing"},
            {"title": "  ", "description": "blank title", "principleSource": "Homebody"},
        ]})
        assert [a.title for a in parse_advice(text)] == ["Keep"]


class TestVisualize:

    @pytest.mark.asyncio
    async def test_one_failure_returns_remaining_in_order(self, room_image):
        variations = CATEGORY_VARIATIONS[DesignCategory.LIGHTING]

        def responder(contents, **_):
            prompt = contents[1]
            if variations[1] in prompt:
                raise RuntimeError("boom")
            index = next(i for i, v in enumerate(variations) if v in prompt)
            return image_response(f"img{index}".encode())

        results = await GeminiService(client=FakeClient(responder)).generate_design_visualizations(
            room_image, DesignCategory.LIGHTING, 4
        )

        assert [v.image.data for v in results] == [b"img0", b"img2", b"img3"]
        assert [v.principle for v in results] == [variations[0], variations[2], variations[3]]

    @pytest.mark.asyncio
    async def test_missing_image_part_is_dropped(self, room_image):
        variations = CATEGORY_VARIATIONS[DesignCategory.COLOR_PALETTE]

        def responder(contents, **_):
            if variations[0] in contents[1]:
                return text_response("no picture today")
            return image_response()

        results = await GeminiService(client=FakeClient(responder)).generate_design_visualizations(
            room_image, DesignCategory.COLOR_PALETTE, 4
        )
        assert len(results) == 3

    @pytest.mark.asyncio
    async def test_all_failures_return_empty_list(self, room_image):
        def boom(**_):
            raise RuntimeError("down")

        results = await GeminiService(client=FakeClient(boom)).generate_design_visualizations(
            room_image, DesignCategory.LIGHTING, 4
        )
        assert results == []

    @pytest.mark.asyncio
    async def test_count_limits_calls_and_falls_back_to_generic_table(self, room_image):
        client = FakeClient(lambda **_: image_response())
        results = await GeminiService(client=client).generate_design_visualizations(
            room_image, DesignCategory.DECOR, 2
        )

        assert len(results) == 2
        assert len(client.models.calls) == 2
        prompts = sorted(call["contents"][1] for call in client.models.calls)
        assert any(DEFAULT_VARIATIONS[0] in p for p in prompts)
        assert any(DEFAULT_VARIATIONS[1] in p for p in prompts)
        assert all("photorealistic" in p for p in prompts)

    @pytest.mark.asyncio
    async def test_count_below_one_rejected(self, room_image):
        client = FakeClient(lambda **_: image_response())
        with pytest.raises(ValueError):
            await GeminiService(client=client).generate_design_visualizations(room_image, DesignCategory.DECOR, 0)
