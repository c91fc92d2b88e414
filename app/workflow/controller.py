"""세션 단위 워크플로우 상태 머신

상태 전이:
    idle -> cleaning -> idle
    idle -> analyzing -> visualizing -> idle

한 번에 하나의 단계만 진행된다. 진행 중에 새 단계를 시작하면 대기열에 넣지 않고
WorkflowBusyError를 발생시킨다 (UI에서 버튼을 비활성화하는 것과 같은 경계).
"""
from typing import Callable, List, Optional

from ..config import settings
from ..exceptions import GenerationError, WorkflowBusyError
from ..models.schemas import (
    DesignCategory,
    RoomImage,
    WorkflowSnapshot,
    WorkflowState,
)
from ..services.gemini_service import GeminiService, get_gemini_service
from ..utils.logger import get_logger

logger = get_logger("workflow")

CLEAN_ERROR_MESSAGE = "Could not clean the room. Please try again."
GENERATE_ERROR_MESSAGE = "Analysis failed. The AI might be busy, please try again."

StateListener = Callable[[WorkflowState], None]


class WorkflowController:
    """업로드 -> (정리) -> 분석 -> 시각화 흐름을 관리"""

    def __init__(
        self,
        service_factory: Callable[[], GeminiService] = get_gemini_service,
        visualization_count: Optional[int] = None
    ):
        self._service_factory = service_factory
        self._service: Optional[GeminiService] = None
        self.visualization_count = visualization_count or settings.visualization_count
        self._listeners: List[StateListener] = []

        self._state = WorkflowState.IDLE
        self._category = DesignCategory.LIGHTING
        self._original: Optional[RoomImage] = None
        self._cleaned: Optional[RoomImage] = None
        self._clean_mode = False
        self._advice = ()
        self._visualizations = ()
        self._error: Optional[str] = None

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def active_image(self) -> Optional[RoomImage]:
        if self._clean_mode and self._cleaned is not None:
            return self._cleaned
        return self._original

    def add_listener(self, listener: StateListener) -> None:
        """상태 전이 콜백 등록"""
        self._listeners.append(listener)

    def snapshot(self) -> WorkflowSnapshot:
        return WorkflowSnapshot(
            state=self._state,
            category=self._category,
            clean_mode=self._clean_mode,
            original_image=self._original,
            cleaned_image=self._cleaned,
            active_image=self.active_image,
            advice=self._advice,
            visualizations=self._visualizations,
            error=self._error,
        )

    def _get_service(self) -> GeminiService:
        # API 키가 없으면 여기서 ConfigurationError (원격 호출 전)
        if self._service is None:
            self._service = self._service_factory()
        return self._service

    def _transition(self, state: WorkflowState) -> None:
        logger.debug(f"Workflow state: {self._state.value} -> {state.value}")
        self._state = state
        for listener in self._listeners:
            listener(state)

    def _ensure_idle(self) -> None:
        if self._state != WorkflowState.IDLE:
            raise WorkflowBusyError(f"'{self._state.value}' 단계가 진행 중입니다.")

    def upload(self, image: RoomImage) -> None:
        """새 원본 이미지로 교체하고 이전 결과를 모두 초기화"""
        self._ensure_idle()
        self._original = image
        self._cleaned = None
        self._clean_mode = False
        self._advice = ()
        self._visualizations = ()
        self._error = None
        logger.info(f"Room image uploaded ({len(image.data)} bytes, {image.mime_type})")

    def select_category(self, category: DesignCategory) -> None:
        self._category = category

    async def set_clean_mode(self, enabled: bool) -> None:
        """체크박스 토글. 정리 진행 중이면 어느 쪽이든 WorkflowBusyError."""
        if enabled:
            await self.enable_clean_mode()
        else:
            self.disable_clean_mode()

    async def enable_clean_mode(self) -> None:
        if self._original is None:
            return

        # 캐시된 정리 이미지가 있으면 원격 호출 없이 전환
        if self._cleaned is not None:
            self._clean_mode = True
            return

        self._ensure_idle()
        service = self._get_service()
        original = self._original

        self._error = None
        self._transition(WorkflowState.CLEANING)
        try:
            cleaned = await service.declutter_image(original)
        except GenerationError as e:
            logger.warning(f"Clean mode failed: {str(e)}")
            self._error = CLEAN_ERROR_MESSAGE
            self._clean_mode = False
        else:
            self._cleaned = cleaned
            self._clean_mode = True
        finally:
            self._transition(WorkflowState.IDLE)

    def disable_clean_mode(self) -> None:
        # 정리 중에는 토글 불가 (완료 시 clean_mode가 다시 켜지므로)
        if self._state == WorkflowState.CLEANING:
            raise WorkflowBusyError(f"'{self._state.value}' 단계가 진행 중입니다.")
        # 정리 이미지는 버리지 않는다 (재활성화 시 재사용)
        self._clean_mode = False

    async def generate(self) -> None:
        """조언 생성 후 시각화 생성. 활성 이미지가 없으면 아무 것도 하지 않는다."""
        image = self.active_image
        if image is None:
            return

        self._ensure_idle()
        service = self._get_service()
        category = self._category

        # 조언과 시각화는 한 쌍으로 교체
        self._advice = ()
        self._visualizations = ()
        self._error = None

        self._transition(WorkflowState.ANALYZING)
        try:
            advice = await service.analyze_room_design(image, category)
            self._advice = tuple(advice)

            self._transition(WorkflowState.VISUALIZING)
            visualizations = await service.generate_design_visualizations(
                image, category, self.visualization_count
            )
            self._visualizations = tuple(visualizations)
        except GenerationError as e:
            logger.warning(f"Generate failed during {self._state.value}: {str(e)}")
            self._error = GENERATE_ERROR_MESSAGE
        finally:
            self._transition(WorkflowState.IDLE)
