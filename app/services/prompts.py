"""Gemini 프롬프트 및 카테고리별 변형 테이블"""
from typing import Dict, List

from ..models.schemas import DesignCategory


REFERENCE_BOOKS = [
    "The Interior Design Handbook by Frida Ramstedt",
    "Domino: The Book of Decorating",
    "Architectural Digest at 100",
    "Habitat: The Field Guide to Decorating by Lauren Liess",
    "Elements of Style by Erin Gates",
    "Homebody by Joanna Gaines",
    "Made for Living by Amber Lewis",
    "Live Beautiful by Athena Calderone",
    "The Finer Things by Christiane Lemieux",
    "Vogue Living: Country, City, Coast",
]

DECLUTTER_PROMPT = (
    "Act as a professional home organizer and interior photographer. "
    "Your task is to 'digitally declutter' this room. "
    "1) Remove all loose items from floors, tables, and countertops (papers, clothes, toys, trash). "
    "2) Straighten rugs, pillows, and curtains. "
    "3) Keep the architectural structure, lighting, flooring, and main furniture pieces EXACTLY as they are. "
    "Do not change the wall color or furniture style. "
    "The goal is to make the room look like it was just tidied up for a real estate listing."
)


def build_analysis_system_instruction() -> str:
    """참고 도서 목록과 근거 규칙을 담은 시스템 지시문"""
    books = "\n".join(f"{i}. {book}" for i, book in enumerate(REFERENCE_BOOKS, 1))
    return f"""You are a Senior Interior Design Architect. Your advice is strictly grounded in the principles found in the top 10 interior design books:
{books}

RULES:
1. ANALYZE the image accurately. Do not hallucinate furniture or windows that are not there.
2. Suggest improvements based ONLY on the user's selected category.
3. For every piece of advice, you MUST cite a specific principle or concept from one of the books above.
4. Be concise and actionable.
"""


def build_analysis_prompt(category: DesignCategory) -> str:
    return f"""Analyze this room photo.
Focus specifically on the category: "{category.value}".

Provide 4 distinct, actionable design improvements.

Return the response as a JSON object with the following schema:
{{
  "advice": [
    {{ "title": "Headline", "description": "Detailed advice", "principleSource": "Book Name: Principle Name" }}
  ]
}}
"""


# 카테고리별 디자인 원칙 변형
CATEGORY_VARIATIONS: Dict[DesignCategory, List[str]] = {
    DesignCategory.LIGHTING: [
        "Apply the 'Layered Lighting' principle. Show Ambient lighting as the base layer for overall illumination.",
        "Apply the 'Task Lighting' principle. Focus on direct light for reading or working areas (lamps, under-cabinet).",
        "Apply the 'Accent Lighting' principle. Highlight architectural features or art with directional spotlights.",
        "Apply the 'Atmospheric/Mood Lighting' principle. Use warm color temperatures, dimmers, and soft diffusers for a cozy vibe.",
    ],
    DesignCategory.LAYOUT: [
        "Layout Principle: 'The Triangle of Flow'. Optimize pathways between major furniture pieces for easy movement.",
        "Layout Principle: 'Social Convergence'. Arrange furniture to face each other to encourage conversation (circular or U-shape).",
        "Layout Principle: 'Zoning'. Create distinct functional zones (e.g. reading nook vs watching TV) using rugs or furniture placement.",
        "Layout Principle: 'Symmetry and Balance'. Create a formal, mirror-image arrangement for a calm, stable look.",
    ],
    DesignCategory.COLOR_PALETTE: [
        "Color Theory: Monochromatic harmony. Use varying shades of a single dominant color found in the room.",
        "Color Theory: Analogous colors. Use colors that sit next to each other on the color wheel for a serene look.",
        "Color Theory: Complementary contrast. Introduce accents that are opposite on the color wheel to the main room color.",
        "Color Theory: The 60-30-10 Rule. 60% dominant neutral, 30% secondary color, 10% bold accent color.",
    ],
}

# 전용 테이블이 없는 카테고리용
DEFAULT_VARIATIONS: List[str] = [
    "Design Style: Minimalist and Modern. Clean lines, decluttered surfaces, functional furniture.",
    "Design Style: Organic Modern (Biophilic). Introduce plants, natural wood textures, and soft curves.",
    "Design Style: Transitional. Blend traditional warmth with modern lines.",
    "Design Style: Eclectic. Mix textures, eras, and patterns for a collected, curated look.",
]


def select_variations(category: DesignCategory, count: int) -> List[str]:
    """카테고리에 맞는 변형을 최대 count개 선택"""
    return CATEGORY_VARIATIONS.get(category, DEFAULT_VARIATIONS)[:count]


def build_visualization_prompt(variation: str) -> str:
    return f"""Create a photorealistic visualization of this room.
Keep the room's main structure (walls, windows, floor type) exactly the same.
Apply this design principle: {variation}
Make it look like a high-end interior design portfolio shot.
"""
