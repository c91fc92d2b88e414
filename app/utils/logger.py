"""로깅 설정

루트 로거 `lumina_api` 하나에 핸들러를 달고, 모듈은 `get_logger("gemini")`처럼
하위 로거를 받아 쓴다. 하위 로거는 부모 핸들러로 전파되므로 로그 한 줄에
어느 컴포넌트(gemini, workflow, sessions, api)에서 나왔는지가 남는다.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from ..config import settings

ROOT_LOGGER_NAME = "lumina_api"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, level: str = "INFO", log_dir: Optional[str] = "logs") -> logging.Logger:
    """콘솔 + (선택) 파일 로거 설정

    log_dir가 비어 있으면 파일에 쓰지 않는다. 같은 이름으로 다시 호출하면
    레벨만 갱신하고 핸들러는 추가하지 않는다.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path / "app.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(component: str) -> logging.Logger:
    """컴포넌트별 하위 로거 (예: lumina_api.gemini)"""
    return logger.getChild(component)


# 전역 로거 인스턴스
logger = setup_logger(ROOT_LOGGER_NAME, settings.log_level, settings.log_dir)
