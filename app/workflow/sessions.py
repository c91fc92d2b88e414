"""인메모리 세션 저장소"""
import uuid
from collections import OrderedDict
from typing import Callable, Optional, Tuple

from ..config import settings
from ..utils.logger import get_logger
from .controller import WorkflowController

logger = get_logger("sessions")


class SessionStore:
    """브라우저 세션별 WorkflowController 보관 (영속화 없음)"""

    def __init__(
        self,
        controller_factory: Callable[[], WorkflowController] = WorkflowController,
        max_sessions: Optional[int] = None
    ):
        self._controller_factory = controller_factory
        self.max_sessions = max_sessions or settings.max_sessions
        self._sessions: "OrderedDict[str, WorkflowController]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def create(self) -> Tuple[str, WorkflowController]:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = self._controller_factory()

        # 최대 세션 수 초과 시 가장 오래된 세션 제거
        while len(self._sessions) > self.max_sessions:
            evicted_id, _ = self._sessions.popitem(last=False)
            logger.info(f"Session evicted: {evicted_id}")

        logger.info(f"Session created: {session_id} ({len(self._sessions)} active)")
        return session_id, self._sessions[session_id]

    def get(self, session_id: str) -> WorkflowController:
        """세션 조회. 없으면 KeyError."""
        return self._sessions[session_id]

    def delete(self, session_id: str) -> None:
        del self._sessions[session_id]
        logger.info(f"Session deleted: {session_id}")


# 싱글톤 인스턴스
_session_store = None

def get_session_store() -> SessionStore:
    """SessionStore 인스턴스 가져오기"""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
