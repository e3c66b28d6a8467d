from __future__ import annotations

from dataclasses import dataclass, field

from wikidelete.core.collaborators import Authorizer
from wikidelete.core.domain import Actor, DeletionTarget, PermissionViolation
from wikidelete.core.settings import Settings
from wikidelete.core.tokens import token_matches


@dataclass
class GroupAuthorizer:
    """Grants an action to actors holding one of the configured groups."""

    token_secret: str
    rights: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings) -> "GroupAuthorizer":
        return cls(token_secret=settings.token_secret, rights={"delete": list(settings.delete_groups)})

    def user_permission_errors(
        self, action: str, target: DeletionTarget, actor: Actor, token: str | None
    ) -> list[PermissionViolation]:
        errors: list[PermissionViolation] = []
        if not token_matches(actor.name, token, self.token_secret, salt=action):
            errors.append(PermissionViolation("badtoken"))
        allowed = self.rights.get(action, [])
        if not actor.groups.intersection(allowed):
            errors.append(PermissionViolation("permissiondenied", (target.title.prefixed_text,)))
        if actor.blocked:
            errors.append(PermissionViolation("blocked", (actor.name,)))
        return errors


class PermissionGate:
    def __init__(self, authorizer: Authorizer):
        self.authorizer = authorizer

    def check(self, target: DeletionTarget, actor: Actor, token: str | None) -> list[PermissionViolation]:
        return list(self.authorizer.user_permission_errors("delete", target, actor, token))
