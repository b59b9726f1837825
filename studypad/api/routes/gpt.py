import logging

from fastapi import APIRouter, Depends, HTTPException, status

from studypad.api.deps import AuthenticatedUser, get_current_user, get_rag_service
from studypad.core.errors import GenerationFailure, InvalidInput, PersistenceFailure
from studypad.models.chat import ApiResponse, HistoryItem, PromptRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/gpt", tags=["gpt"])

_rag_service = get_rag_service()


@router.get("", response_model=ApiResponse)
def list_history(current_user: AuthenticatedUser = Depends(get_current_user)) -> ApiResponse:
    try:
        records = _rag_service.history(current_user.username)
    except PersistenceFailure as exc:
        logger.exception("History lookup failed | user=%s", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error: {exc.reason}",
        ) from exc

    items = [HistoryItem.from_record(record) for record in records]
    return ApiResponse(success=True, message="History loaded", data=items)


@router.post("", response_model=ApiResponse)
def ask_question(
    payload: PromptRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> ApiResponse:
    logger.info("Question received | user=%s", current_user.username)

    try:
        record = _rag_service.ask(user=current_user.username, question=payload.prompt)
    except InvalidInput as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.reason) from exc
    except (GenerationFailure, PersistenceFailure) as exc:
        logger.exception("Question could not be answered | user=%s", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error: {exc.reason}",
        ) from exc

    return ApiResponse(success=True, message="Question answered", data=HistoryItem.from_record(record))
