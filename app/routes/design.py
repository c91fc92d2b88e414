from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, Response
import os
from typing import List

from ..models.schemas import (
    CategoryOption,
    CategoryRequest,
    CleanModeRequest,
    DesignCategory,
    SessionResponse,
)
from ..exceptions import ConfigurationError, WorkflowBusyError
from ..workflow.controller import WorkflowController
from ..workflow.sessions import SessionStore, get_session_store
from ..utils.images import load_room_image
from ..config import settings
from ..utils.logger import get_logger

logger = get_logger("api")

router = APIRouter(prefix="/api", tags=["design"])


def _get_controller(store: SessionStore, session_id: str) -> WorkflowController:
    try:
        return store.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="세션을 찾을 수 없습니다.")


def _session_response(session_id: str, controller: WorkflowController) -> SessionResponse:
    return SessionResponse.from_snapshot(session_id, controller.snapshot())


@router.get("/categories", response_model=List[CategoryOption])
async def get_categories():
    """선택 가능한 디자인 카테고리 목록 반환"""
    return [CategoryOption(id=category.id, name=category.value) for category in DesignCategory]


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(store: SessionStore = Depends(get_session_store)):
    """새 작업 세션 생성"""
    session_id, controller = store.create()
    return _session_response(session_id, controller)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """세션 상태 조회"""
    controller = _get_controller(store, session_id)
    return _session_response(session_id, controller)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)):
    """세션 삭제"""
    try:
        store.delete(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="세션을 찾을 수 없습니다.")
    return Response(status_code=204)


@router.post("/sessions/{session_id}/upload", response_model=SessionResponse)
async def upload_image(
    session_id: str,
    file: UploadFile = File(...),
    store: SessionStore = Depends(get_session_store)
):
    """방 사진 업로드 (파일 크기 제한 포함)"""
    controller = _get_controller(store, session_id)
    logger.info(f"Upload requested for {session_id}: {file.filename}")

    # 파일 확장자 검증
    file_ext = os.path.splitext(file.filename or "")[1].lower()
    if file_ext not in settings.allowed_extensions:
        logger.warning(f"Invalid file extension: {file_ext}")
        raise HTTPException(
            status_code=400,
            detail=f"지원하지 않는 파일 형식입니다. 허용된 형식: {', '.join(settings.allowed_extensions)}"
        )

    # 파일 크기 제한 (청크로 읽으면서 검증)
    max_size = settings.max_upload_size_mb * 1024 * 1024
    content = bytearray()
    chunk_size = 1024 * 1024  # 1MB chunks

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        content.extend(chunk)
        if len(content) > max_size:
            logger.warning(f"File too large: {len(content)} bytes")
            raise HTTPException(
                status_code=413,
                detail=f"파일 크기가 너무 큽니다. 최대 {settings.max_upload_size_mb}MB까지 허용됩니다."
            )

    try:
        image = load_room_image(bytes(content))
    except ValueError as e:
        logger.warning(f"Rejected upload: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))

    try:
        controller.upload(image)
    except WorkflowBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _session_response(session_id, controller)


@router.put("/sessions/{session_id}/category", response_model=SessionResponse)
async def select_category(
    session_id: str,
    request: CategoryRequest,
    store: SessionStore = Depends(get_session_store)
):
    """디자인 카테고리 선택 (원격 호출 없음)"""
    controller = _get_controller(store, session_id)
    controller.select_category(request.category)
    return _session_response(session_id, controller)


@router.put("/sessions/{session_id}/clean-mode", response_model=SessionResponse)
async def set_clean_mode(
    session_id: str,
    request: CleanModeRequest,
    store: SessionStore = Depends(get_session_store)
):
    """정리 모드 토글. 정리 이미지가 없으면 생성한다."""
    controller = _get_controller(store, session_id)
    try:
        await controller.set_clean_mode(request.enabled)
    except WorkflowBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

    return _session_response(session_id, controller)


@router.post("/sessions/{session_id}/generate", response_model=SessionResponse)
async def generate_ideas(session_id: str, store: SessionStore = Depends(get_session_store)):
    """조언 및 시각화 생성"""
    controller = _get_controller(store, session_id)
    try:
        await controller.generate()
    except WorkflowBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

    return _session_response(session_id, controller)
