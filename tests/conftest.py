"""Shared fakes for the Gemini client and the generation service."""

from io import BytesIO
from types import SimpleNamespace

import pytest
from PIL import Image

from app.exceptions import GenerationError
from app.models.schemas import DesignAdvice, RoomImage, Visualization


def image_response(data: bytes = b"generated", mime_type: str = "image/png"):
    """Build a response shaped like google-genai's GenerateContentResponse with one image part."""
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))],
        text=None,
    )


def text_response(text):
    part = SimpleNamespace(inline_data=None, text=text)
    return SimpleNamespace(
        candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))],
        text=text,
    )


class FakeModels:
    """Stands in for ``client.models``; ``responder`` maps a call to a response or raises."""

    def __init__(self, responder):
        self.responder = responder
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        return self.responder(model=model, contents=contents, config=config)


class FakeClient:
    def __init__(self, responder):
        self.models = FakeModels(responder)


class FakeService:
    """In-process replacement for GeminiService used by workflow and API tests."""

    def __init__(
        self,
        cleaned=None,
        advice=None,
        visualizations=None,
        clean_error=False,
        analyze_error=False,
        visualize_error=False,
    ):
        self.cleaned = cleaned or RoomImage(data=b"cleaned", mime_type="image/png")
        self.advice = advice if advice is not None else [
            DesignAdvice(title=f"Idea {i}", description=f"Do thing {i}", principleSource="Habitat: Layers")
            for i in range(4)
        ]
        self.visualizations = visualizations if visualizations is not None else [
            Visualization(image=RoomImage(data=f"v{i}".encode(), mime_type="image/png"), principle=f"P{i}")
            for i in range(4)
        ]
        self.clean_error = clean_error
        self.analyze_error = analyze_error
        self.visualize_error = visualize_error
        self.calls = []

    async def declutter_image(self, image):
        self.calls.append(("declutter", image))
        if self.clean_error:
            raise GenerationError("No image generated.")
        return self.cleaned

    async def analyze_room_design(self, image, category):
        self.calls.append(("analyze", image, category))
        if self.analyze_error:
            raise GenerationError("analysis down")
        return list(self.advice)

    async def generate_design_visualizations(self, image, category, count=4):
        self.calls.append(("visualize", image, category, count))
        if self.visualize_error:
            raise GenerationError("visualization down")
        return list(self.visualizations)[:count]


@pytest.fixture
def room_image() -> RoomImage:
    return RoomImage(data=b"original-room", mime_type="image/jpeg")


@pytest.fixture
def fake_service() -> FakeService:
    return FakeService()


@pytest.fixture
def png_bytes() -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (8, 8), color=(200, 180, 160)).save(buffer, format="PNG")
    return buffer.getvalue()
