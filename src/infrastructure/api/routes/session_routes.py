from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from src.application.dtos.common_dto import ErrorResponse
from src.application.dtos.session_dto import (
    DeleteSessionResponse,
    HistoryStepResponse,
    OperationRequest,
    OperationResponse,
    SessionMetadata,
    StartSessionResponse,
)
from src.application.use_cases.apply_operation import ApplyOperationUseCase
from src.application.use_cases.navigate_history import NavigateHistoryUseCase, SessionState
from src.application.use_cases.start_session import StartSessionUseCase
from src.infrastructure.api.dependencies import (
    get_apply_operation_use_case,
    get_image_codec,
    get_navigate_history_use_case,
    get_session_registry,
    get_start_session_use_case,
)
from src.infrastructure.sessions.session_registry import SessionRegistry
from src.infrastructure.storage.image_codec import ImageCodec

router = APIRouter(
    prefix="/sessions",
    tags=["Editing Sessions"],
    responses={
        404: {"model": ErrorResponse, "description": "Not Found - Session does not exist or has ended"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)


def _to_metadata(state: SessionState, registry: SessionRegistry) -> SessionMetadata:
    session = registry.get(state.session_id)
    return SessionMetadata(
        id=state.session_id,
        width=state.image.width,
        height=state.image.height,
        channels=state.image.channels,
        current_label=state.current_label,
        can_undo=state.can_undo,
        can_redo=state.can_redo,
        undo_history=state.undo_labels,
        redo_history=state.redo_labels,
        image_url=f"/sessions/{state.session_id}/image",
        created_at=session.created_at,
        original_filename=session.original_filename,
    )


@router.post(
    "",
    response_model=StartSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start Editing Session",
    description="""
    Upload an image and start an in-memory editing session for it.

    **Supported formats**: anything Pillow can decode (JPEG, PNG, GIF, BMP, TIFF, WEBP)

    The uploaded image will be:
    - Converted to RGB and normalized to [0, 1]
    - Kept in memory as the session's current image
    - Pushed as the first entry of the session's undo history

    Sessions are not persisted and disappear when the process stops.
    """,
    response_description="State of the newly created session",
    responses={400: {"model": ErrorResponse, "description": "Invalid image file"}},
)
async def start_session(
    file: UploadFile = File(..., description="Image file to edit"),
    codec: ImageCodec = Depends(get_image_codec),
    uc: StartSessionUseCase = Depends(get_start_session_use_case),
    history: NavigateHistoryUseCase = Depends(get_navigate_history_use_case),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Decode the upload and start a session with it."""
    try:
        image = codec.decode(await file.read())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid image file: {exc}") from exc
    session = uc.execute(image, original_filename=file.filename)
    state = await asyncio.wrap_future(history.state(session.id))
    return StartSessionResponse(session=_to_metadata(state, registry))


@router.get(
    "/{session_id}",
    response_model=SessionMetadata,
    summary="Get Session State",
    description="""
    Current image size, undo/redo availability and the labels of both history
    stacks (oldest first). The state is read between queued operations, never
    in the middle of one.
    """,
)
async def get_session(
    session_id: str,
    history: NavigateHistoryUseCase = Depends(get_navigate_history_use_case),
    registry: SessionRegistry = Depends(get_session_registry),
):
    state = await asyncio.wrap_future(history.state(session_id))
    return _to_metadata(state, registry)


@router.get(
    "/{session_id}/image",
    summary="Download Current Image",
    description="Encode the session's current image. PNG by default; `format=jpeg` for JPEG.",
    response_description="Binary image file data",
    responses={200: {"content": {"image/*": {}}, "description": "Image file content"}},
)
async def download_image(
    session_id: str,
    fmt: str = Query("png", alias="format", pattern="^(png|jpe?g)$", description="Output format"),
    history: NavigateHistoryUseCase = Depends(get_navigate_history_use_case),
    codec: ImageCodec = Depends(get_image_codec),
):
    state = await asyncio.wrap_future(history.state(session_id))
    encoded = codec.encode(state.image, ext=fmt)
    return Response(content=encoded.data, media_type=encoded.content_type)


@router.post(
    "/{session_id}/operations",
    response_model=OperationResponse,
    summary="Apply Operation",
    description="""
    Resolve an operation from its tag and parameters and apply it to the
    session's current image.

    Operations on one session run strictly in submission order. A failed
    operation is rolled back: the session is left exactly as it was.

    **Supported operations:**
    - `brightness` - params: `{"brightness": 0.3}` (negative darkens)
    - `contrast` - params: `{"contrast": 1.5}` (0 < factor <= 5)
    - `crop` - params: `{"x": 0, "y": 0, "width": 100, "height": 100}`
    - `rotate` - params: `{"angle": "90"}` or `{"angle": 100}` (snaps to 90)
    - `blur` - params: `{"intensity": "medium"}` or `{"intensity": 5}`
    - `flip` - params: `{"direction": "horizontal"}` or `"vertical"`
    - `mirror` - params: `{"side": "left"}` (the kept half: left, right, top, bottom)
    - `grayscale` - params: `{"algorithm": "luminosity"}` (or average, desaturation; optional)
    - `saturation` - params: `{"saturation": 1.5}` (0 removes color, 1 keeps it)
    - `batch` - params: `{"operations": [{"operation": "blur", "params": {...}}]}`

    `ai_enhance`, `background_removal` and `artistic_style` are recognized but
    not implemented (501).
    """,
    response_description="Result size plus the session state after the operation",
    responses={
        400: {"model": ErrorResponse, "description": "Missing or malformed parameters, unknown operation"},
        422: {"model": ErrorResponse, "description": "Operation failed against the image and was rolled back"},
        501: {"model": ErrorResponse, "description": "Operation not implemented"},
    },
)
async def apply_operation(
    session_id: str,
    body: OperationRequest,
    uc: ApplyOperationUseCase = Depends(get_apply_operation_use_case),
    history: NavigateHistoryUseCase = Depends(get_navigate_history_use_case),
    registry: SessionRegistry = Depends(get_session_registry),
):
    queued = uc.execute(session_id, body.operation, body.params)
    result = await asyncio.wrap_future(queued.future)
    state = await asyncio.wrap_future(history.state(session_id))
    return OperationResponse(
        operation=body.operation.strip().lower(),
        operation_name=queued.name,
        params=body.params,
        width=result.width,
        height=result.height,
        session=_to_metadata(state, registry),
    )


@router.post(
    "/{session_id}/undo",
    response_model=HistoryStepResponse,
    summary="Undo",
    description="Step back one entry in the session history. A no-op when there is nothing to undo.",
)
async def undo(
    session_id: str,
    history: NavigateHistoryUseCase = Depends(get_navigate_history_use_case),
    registry: SessionRegistry = Depends(get_session_registry),
):
    image = await asyncio.wrap_future(history.undo(session_id))
    state = await asyncio.wrap_future(history.state(session_id))
    return HistoryStepResponse(changed=image is not None, session=_to_metadata(state, registry))


@router.post(
    "/{session_id}/redo",
    response_model=HistoryStepResponse,
    summary="Redo",
    description="Re-apply the last undone step. A no-op when there is nothing to redo.",
)
async def redo(
    session_id: str,
    history: NavigateHistoryUseCase = Depends(get_navigate_history_use_case),
    registry: SessionRegistry = Depends(get_session_registry),
):
    image = await asyncio.wrap_future(history.redo(session_id))
    state = await asyncio.wrap_future(history.state(session_id))
    return HistoryStepResponse(changed=image is not None, session=_to_metadata(state, registry))


@router.delete(
    "/{session_id}",
    response_model=DeleteSessionResponse,
    summary="End Session",
    description="Drop the session and its history. This cannot be undone.",
)
async def end_session(
    session_id: str,
    uc: StartSessionUseCase = Depends(get_start_session_use_case),
):
    if not uc.end(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return DeleteSessionResponse(ok=True)
