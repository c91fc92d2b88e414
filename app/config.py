"""애플리케이션 설정"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """환경변수 기반 설정"""

    # API Keys (첫 원격 호출 시점에 검사)
    gemini_api_key: str = ""

    # Application
    app_name: str = "Lumina Interior Design API"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # File Upload
    max_upload_size_mb: int = 10
    allowed_extensions: List[str] = [".jpg", ".jpeg", ".png", ".webp"]

    # Gemini API
    clean_model: str = "gemini-2.5-flash-image"
    analysis_model: str = "gemini-3-pro-preview"
    visualization_model: str = "gemini-2.5-flash-image"
    visualization_count: int = 4
    gemini_concurrent_requests: int = 4  # 4개 변형 모두 병렬 처리
    strict_advice_parsing: bool = False  # True면 깨진 JSON 응답을 오류로 처리

    # Sessions
    max_sessions: int = 100

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    class Config:
        env_file = ".env"
        case_sensitive = False


# 전역 설정 인스턴스
settings = Settings()
