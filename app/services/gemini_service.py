import asyncio
import json
from google import genai
from google.genai import types
from pydantic import ValidationError
from typing import List, Optional

from ..config import settings
from ..exceptions import ConfigurationError, GenerationError
from ..models.schemas import DesignAdvice, DesignCategory, RoomImage, Visualization
from ..utils.logger import get_logger
from .prompts import (
    DECLUTTER_PROMPT,
    build_analysis_prompt,
    build_analysis_system_instruction,
    build_visualization_prompt,
    select_variations,
)

logger = get_logger("gemini")


# 조언 응답 스키마 (structured output)
ADVICE_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "advice": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "title": types.Schema(type=types.Type.STRING),
                    "description": types.Schema(type=types.Type.STRING),
                    "principleSource": types.Schema(type=types.Type.STRING),
                },
                required=["title", "description", "principleSource"],
            ),
        ),
    },
)


def _strip_code_fence(text: str) -> str:
    """마크다운 코드 블록 제거"""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_advice(text: Optional[str], strict: bool = False) -> List[DesignAdvice]:
    """조언 JSON 파싱. advice 필드가 없거나 잘못되면 빈 리스트."""
    raw = _strip_code_fence(text or "{}")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        if strict:
            raise GenerationError(f"Advice response is not valid JSON: {e}") from e
        logger.warning(f"Advice response is not valid JSON, treating as no advice: {e}")
        return []

    items = payload.get("advice") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        logger.warning("Advice response has no 'advice' list, treating as no advice")
        return []

    advice = []
    for item in items:
        try:
            advice.append(DesignAdvice.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping malformed advice item: {e.error_count()} error(s)")
    return advice


class GeminiService:
    """Google Gemini API 서비스"""

    def __init__(self, client: Optional[genai.Client] = None):
        if client is None:
            # 설정에서 API 키 로드
            if not settings.gemini_api_key:
                raise ConfigurationError("GEMINI_API_KEY가 설정되지 않았습니다.")
            client = genai.Client(api_key=settings.gemini_api_key)

        self.client = client
        logger.info("GeminiService initialized")

    @staticmethod
    def _image_part(image: RoomImage) -> types.Part:
        return types.Part.from_bytes(data=image.data, mime_type=image.mime_type)

    @staticmethod
    def _extract_image(response) -> Optional[RoomImage]:
        """응답에서 첫 번째 이미지 파트 추출"""
        candidates = getattr(response, "candidates", None) or []
        if not candidates or candidates[0].content is None:
            return None

        for part in candidates[0].content.parts or []:
            inline_data = getattr(part, "inline_data", None)
            if inline_data and inline_data.data:
                return RoomImage(
                    data=inline_data.data,
                    mime_type=inline_data.mime_type or "image/png"
                )
        return None

    async def declutter_image(self, image: RoomImage) -> RoomImage:
        """방 사진에서 잡동사니 제거 (구조/가구/조명 유지)"""
        try:
            logger.info(f"Decluttering room with {settings.clean_model}")
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=settings.clean_model,
                contents=[self._image_part(image), DECLUTTER_PROMPT],
            )
        except Exception as e:
            logger.error(f"Room cleaning failed: {type(e).__name__}: {str(e)}", exc_info=True)
            raise GenerationError(f"Room cleaning request failed: {str(e)}") from e

        cleaned = self._extract_image(response)
        if cleaned is None:
            logger.error("Room cleaning returned no image part")
            raise GenerationError("No image generated.")

        logger.info(f"Room cleaned ({len(cleaned.data)} bytes, {cleaned.mime_type})")
        return cleaned

    async def analyze_room_design(
        self,
        image: RoomImage,
        category: DesignCategory
    ) -> List[DesignAdvice]:
        """카테고리별 디자인 조언 생성 (JSON mode)"""
        try:
            logger.info(f"Analyzing room for category: {category.value}")
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=settings.analysis_model,
                contents=[self._image_part(image), build_analysis_prompt(category)],
                config=types.GenerateContentConfig(
                    system_instruction=build_analysis_system_instruction(),
                    response_mime_type="application/json",
                    response_schema=ADVICE_RESPONSE_SCHEMA,
                ),
            )
        except Exception as e:
            logger.error(f"Room analysis failed: {type(e).__name__}: {str(e)}", exc_info=True)
            raise GenerationError(f"Room analysis request failed: {str(e)}") from e

        advice = parse_advice(response.text, strict=settings.strict_advice_parsing)
        logger.info(f"Room analysis completed: {len(advice)} advice item(s) for {category.value}")
        return advice

    async def generate_design_visualizations(
        self,
        image: RoomImage,
        category: DesignCategory,
        count: int = 4
    ) -> List[Visualization]:
        """디자인 원칙별 시각화 이미지를 병렬 생성

        실패한 변형은 로그만 남기고 제외하므로 결과가 count개보다 적을 수 있다.
        성공한 결과는 변형 순서를 유지한다.
        """
        if count < 1:
            raise ValueError("count must be at least 1")

        variations = select_variations(category, count)
        image_part = self._image_part(image)

        # Gemini API Rate Limiting 방지
        semaphore = asyncio.Semaphore(max(1, settings.gemini_concurrent_requests))

        async def generate_variation(variation: str) -> Optional[Visualization]:
            async with semaphore:
                try:
                    response = await asyncio.to_thread(
                        self.client.models.generate_content,
                        model=settings.visualization_model,
                        contents=[image_part, build_visualization_prompt(variation)],
                    )
                except Exception as e:
                    logger.warning(f"Variation failed ({variation[:50]}): {type(e).__name__}: {str(e)}")
                    return None

            generated = self._extract_image(response)
            if generated is None:
                logger.warning(f"Variation returned no image ({variation[:50]})")
                return None
            return Visualization(image=generated, principle=variation)

        logger.info(f"Generating {len(variations)} {category.value} visualizations")
        results = await asyncio.gather(*[generate_variation(v) for v in variations])

        visualizations = [r for r in results if r is not None]
        logger.info(f"Visualization batch completed: {len(visualizations)}/{len(variations)} succeeded")
        return visualizations


# 싱글톤 인스턴스
_gemini_service = None

def get_gemini_service() -> GeminiService:
    """GeminiService 인스턴스 가져오기"""
    global _gemini_service
    if _gemini_service is None:
        _gemini_service = GeminiService()
    return _gemini_service
