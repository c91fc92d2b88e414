from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import design
from .config import settings
from .utils.logger import logger

logger.info(f"Starting {settings.app_name} v{settings.app_version}")

# FastAPI 앱 생성
app = FastAPI(
    title=settings.app_name,
    description="방 사진 기반 인테리어 디자인 조언 및 시각화 API",
    version=settings.app_version,
    debug=settings.debug
)

# CORS 설정 (환경변수 기반)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info(f"CORS enabled for origins: {settings.cors_origins}")

# 라우터 등록
app.include_router(design.router)


@app.get("/")
async def home():
    """서비스 정보"""
    return {"name": settings.app_name, "version": settings.app_version}


@app.get("/health")
async def health_check():
    """헬스 체크 및 시스템 상태"""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "gemini_api_key_configured": bool(settings.gemini_api_key),
        "config": {
            "max_upload_size_mb": settings.max_upload_size_mb,
            "concurrent_requests": settings.gemini_concurrent_requests,
            "visualization_count": settings.visualization_count,
            "strict_advice_parsing": settings.strict_advice_parsing
        }
    }


@app.on_event("startup")
async def startup_event():
    """애플리케이션 시작 시 실행"""
    logger.info("="*50)
    logger.info("Application startup")
    logger.info(f"Debug mode: {settings.debug}")
    logger.info(f"Gemini API configured: {bool(settings.gemini_api_key)}")
    logger.info(f"Max upload size: {settings.max_upload_size_mb}MB")
    logger.info("="*50)


@app.on_event("shutdown")
async def shutdown_event():
    """애플리케이션 종료 시 실행"""
    logger.info("Application shutdown")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
