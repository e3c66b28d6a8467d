from typing import Any, Optional

from pydantic import BaseModel, Field

from wikidelete.core.domain import WatchDirective


class DeleteRequest(BaseModel):
    title: Optional[str] = Field(default=None, description="Title of the page to delete. Cannot be used with pageid")
    pageid: Optional[int] = Field(default=None, description="Page ID of the page to delete. Cannot be used with title")
    token: str = Field(..., description="A delete token from /api/v1/tokens/delete")
    reason: Optional[str] = Field(
        default=None, description="Reason for the deletion. If not set, an automatically generated reason is used"
    )
    watch: bool = Field(default=False, description="Deprecated: add the page to your watchlist")
    unwatch: bool = Field(default=False, description="Deprecated: remove the page from your watchlist")
    watchlist: WatchDirective = WatchDirective.PREFERENCES
    oldimage: Optional[str] = Field(default=None, description="Archive name of the old file revision to delete")


class StatusMessageModel(BaseModel):
    code: str
    params: list[Any] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    title: str
    reason: str
    logid: int
    warnings: list[StatusMessageModel] | None = None


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class TokenResponse(BaseModel):
    token: str


class DeletionLogEntryModel(BaseModel):
    logid: int
    action: str
    title: str
    actor: str
    reason: str
    timestamp: str
    archive_name: str | None = None


class DeletionLogResponse(BaseModel):
    count: int
    entries: list[DeletionLogEntryModel] = Field(default_factory=list)


class HealthResponse(BaseModel):
    ok: bool


class ReadyResponse(BaseModel):
    ready: bool
    backend: str | None = None
    reason: str | None = None
