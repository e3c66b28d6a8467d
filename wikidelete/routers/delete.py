from typing import Annotated

from fastapi import APIRouter, Depends, Query

from wikidelete.core.deletion_log import DeletionLog
from wikidelete.core.domain import Actor
from wikidelete.core.services import DeletionRequestHandler, delete_target
from wikidelete.core.settings import Settings
from wikidelete.core.tokens import issue_token
from wikidelete.deps import (
    current_actor,
    get_deletion_handler,
    get_deletion_log,
    get_settings,
    require_api_key,
)
from wikidelete.models import (
    DeleteRequest,
    DeleteResponse,
    DeletionLogEntryModel,
    DeletionLogResponse,
    ErrorResponse,
    TokenResponse,
)

router = APIRouter(
    tags=["delete"],
    dependencies=[Depends(require_api_key)],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


@router.post(
    "/delete",
    response_model=DeleteResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Delete a page or a file revision",
)
def delete_endpoint(
    payload: DeleteRequest,
    actor: Annotated[Actor, Depends(current_actor)],
    handler: Annotated[DeletionRequestHandler, Depends(get_deletion_handler)],
) -> DeleteResponse:
    return delete_target(handler, payload, actor)


@router.get("/tokens/delete", response_model=TokenResponse)
def delete_token(
    actor: Annotated[Actor, Depends(current_actor)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TokenResponse:
    return TokenResponse(token=issue_token(actor.name, settings.token_secret))


@router.get("/log/deletions", response_model=DeletionLogResponse)
def deletion_log(
    log: Annotated[DeletionLog, Depends(get_deletion_log)],
    limit: int = Query(default=50, ge=1, le=500),
) -> DeletionLogResponse:
    entries = [
        DeletionLogEntryModel(
            logid=e.logid,
            action=e.action,
            title=e.title,
            actor=e.actor,
            reason=e.reason,
            timestamp=e.timestamp,
            archive_name=e.archive_name,
        )
        for e in log.recent(limit)
        if not e.suppressed
    ]
    return DeletionLogResponse(count=len(entries), entries=entries)
