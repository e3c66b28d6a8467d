from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form
from fastapi.responses import JSONResponse

from wikidelete.core.domain import Actor, WatchDirective
from wikidelete.core.errors import APIError
from wikidelete.core.services import DeletionRequestHandler, delete_target
from wikidelete.deps import current_actor, get_deletion_handler, require_api_key
from wikidelete.models import DeleteRequest

router = APIRouter(tags=["legacy"], dependencies=[Depends(require_api_key)])

_WATCHLIST_VALUES = {d.value for d in WatchDirective}


def _flag(value: str | None) -> bool:
    # Boolean parameters are true whenever they are present.
    return value is not None


def _api_error(code: str, info: str) -> JSONResponse:
    return JSONResponse(
        {"error": {"code": code, "info": info}},
        headers={"MediaWiki-API-Error": code},
    )


@router.post(
    "/api.php",
    summary="Form-encoded deletion endpoint (action=delete)",
    description="Accepts application/x-www-form-urlencoded parameters and answers with the "
    '{"delete": {...}} / {"error": {...}} envelopes.',
)
def legacy_api(
    actor: Annotated[Actor, Depends(current_actor)],
    handler: Annotated[DeletionRequestHandler, Depends(get_deletion_handler)],
    action: Optional[str] = Form(default=None),
    title: Optional[str] = Form(default=None),
    pageid: Optional[str] = Form(default=None),
    token: Optional[str] = Form(default=None),
    reason: Optional[str] = Form(default=None),
    watch: Optional[str] = Form(default=None),
    unwatch: Optional[str] = Form(default=None),
    watchlist: str = Form(default=WatchDirective.PREFERENCES.value),
    oldimage: Optional[str] = Form(default=None),
):
    if action != "delete":
        return _api_error("unknown_action", f"Unrecognized value for parameter 'action': {action}")
    if token is None:
        return _api_error("notoken", "The token parameter must be set")
    if watchlist not in _WATCHLIST_VALUES:
        return _api_error("unknown_watchlist", f"Unrecognized value for parameter 'watchlist': {watchlist}")

    page_id = None
    if pageid is not None:
        try:
            page_id = int(pageid)
        except ValueError:
            return _api_error("badinteger", f"Invalid value '{pageid}' for integer parameter 'pageid'")

    req = DeleteRequest(
        title=title,
        pageid=page_id,
        token=token,
        reason=reason,
        watch=_flag(watch),
        unwatch=_flag(unwatch),
        watchlist=WatchDirective(watchlist),
        oldimage=oldimage,
    )
    try:
        result = delete_target(handler, req, actor)
    except APIError as e:
        return _api_error(e.code, e.message)
    return {"delete": result.model_dump(exclude_none=True)}
