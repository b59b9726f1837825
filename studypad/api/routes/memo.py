import logging

from fastapi import APIRouter, Depends, HTTPException, status

from studypad.api.deps import AuthenticatedUser, get_current_user, get_rag_service
from studypad.core.errors import PersistenceFailure
from studypad.models.memo import MemoResponse, MemoSaveRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/memo", tags=["memo"])

_rag_service = get_rag_service()


@router.get("", response_model=MemoResponse)
def read_memo(current_user: AuthenticatedUser = Depends(get_current_user)) -> MemoResponse:
    try:
        content = _rag_service.memo(current_user.username)
    except PersistenceFailure as exc:
        logger.exception("Memo lookup failed | user=%s", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error: {exc.reason}",
        ) from exc

    message = "Memo loaded" if content else "New memo"
    return MemoResponse(success=True, message=message, content=content)


@router.post("", response_model=MemoResponse)
def save_memo(
    payload: MemoSaveRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> MemoResponse:
    try:
        _rag_service.save_memo(user=current_user.username, content=payload.content)
    except PersistenceFailure as exc:
        logger.exception("Memo save failed | user=%s", current_user.username)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error: {exc.reason}",
        ) from exc

    return MemoResponse(success=True, message="Memo saved")
