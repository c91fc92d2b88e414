import base64
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Tuple


class DesignCategory(str, Enum):
    """디자인 포커스 카테고리"""
    LIGHTING = "Lighting"
    COLOR_PALETTE = "Color Palette"
    LAYOUT = "Layout & Flow"
    TEXTURES = "Textures & Fabrics"
    DECOR = "Decor & Styling"

    @property
    def id(self) -> str:
        """URL/요청에서 쓰는 식별자 (예: color_palette)"""
        return self.name.lower()


class WorkflowState(str, Enum):
    """진행 중인 비동기 단계"""
    IDLE = "idle"
    CLEANING = "cleaning"
    ANALYZING = "analyzing"
    VISUALIZING = "visualizing"


class RoomImage(BaseModel):
    """인코딩된 방 이미지 (원본 또는 정리된 버전)"""
    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = "image/jpeg"

    def data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class DesignAdvice(BaseModel):
    """출처가 명시된 디자인 조언 한 건"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    principle_source: str = Field(alias="principleSource", min_length=1)


class Visualization(BaseModel):
    """디자인 원칙 하나를 적용한 생성 이미지"""
    model_config = ConfigDict(frozen=True)

    image: RoomImage
    principle: str


class WorkflowSnapshot(BaseModel):
    """세션 상태의 불변 스냅샷"""
    model_config = ConfigDict(frozen=True)

    state: WorkflowState
    category: DesignCategory
    clean_mode: bool
    original_image: Optional[RoomImage] = None
    cleaned_image: Optional[RoomImage] = None
    active_image: Optional[RoomImage] = None
    advice: Tuple[DesignAdvice, ...] = ()
    visualizations: Tuple[Visualization, ...] = ()
    error: Optional[str] = None


class CategoryOption(BaseModel):
    """카테고리 선택지"""
    id: str
    name: str


class CategoryRequest(BaseModel):
    """카테고리 변경 요청"""
    category: DesignCategory

    @field_validator("category", mode="before")
    @classmethod
    def accept_category_id(cls, value):
        # 표시 이름 또는 식별자 모두 허용
        for category in DesignCategory:
            if value == category.id:
                return category
        return value


class CleanModeRequest(BaseModel):
    """정리 모드 토글 요청"""
    enabled: bool


class VisualizationResponse(BaseModel):
    """시각화 응답 항목"""
    image_url: str
    principle: str


class SessionResponse(BaseModel):
    """세션 상태 응답

    이미지는 각각 한 번만 보낸다. cleaned_image는 정리 모드로 활성화된 경우에만 채워지며,
    그 외에는 original_image가 활성 이미지다.
    """
    session_id: str
    state: WorkflowState
    category: DesignCategory
    clean_mode: bool
    has_cleaned_image: bool
    original_image: Optional[str] = None
    cleaned_image: Optional[str] = None
    advice: List[DesignAdvice] = []
    visualizations: List[VisualizationResponse] = []
    error: Optional[str] = None

    @classmethod
    def from_snapshot(cls, session_id: str, snapshot: WorkflowSnapshot) -> "SessionResponse":
        return cls(
            session_id=session_id,
            state=snapshot.state,
            category=snapshot.category,
            clean_mode=snapshot.clean_mode,
            has_cleaned_image=snapshot.cleaned_image is not None,
            original_image=snapshot.original_image.data_url() if snapshot.original_image else None,
            cleaned_image=(
                snapshot.cleaned_image.data_url()
                if snapshot.clean_mode and snapshot.cleaned_image is not None
                else None
            ),
            advice=list(snapshot.advice),
            visualizations=[
                VisualizationResponse(image_url=v.image.data_url(), principle=v.principle)
                for v in snapshot.visualizations
            ],
            error=snapshot.error,
        )
