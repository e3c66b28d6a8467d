from wikidelete.core.services.deletion_service import (
    DeletionRequestHandler,
    FileDeletionPath,
    PageDeletionPath,
    build_handler,
    delete_target,
)

__all__ = [
    "DeletionRequestHandler",
    "FileDeletionPath",
    "PageDeletionPath",
    "build_handler",
    "delete_target",
]
