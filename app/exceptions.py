"""서비스 예외 정의"""


class ConfigurationError(Exception):
    """필수 설정(API 키 등)이 없을 때. 재시도로 해결되지 않는다."""


class GenerationError(Exception):
    """원격 생성 호출 실패 또는 예상과 다른 응답. 사용자가 다시 시도할 수 있다."""


class WorkflowBusyError(Exception):
    """다른 단계가 진행 중일 때 새 단계를 시작하려 한 경우"""
