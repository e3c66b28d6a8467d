from __future__ import annotations

import hashlib
import hmac

TOKEN_SUFFIX = "+\\"
DELETE_SALT = "delete"


def issue_token(actor_name: str, secret: str, salt: str = DELETE_SALT) -> str:
    if not actor_name:
        return TOKEN_SUFFIX
    h = hmac.new(secret.encode(), digestmod=hashlib.sha256)
    h.update(actor_name.encode())
    h.update(b"\x00")
    h.update(salt.encode())
    return h.hexdigest() + TOKEN_SUFFIX


def token_matches(actor_name: str, token: str | None, secret: str, salt: str = DELETE_SALT) -> bool:
    if not token:
        return False
    expected = issue_token(actor_name, secret, salt)
    return hmac.compare_digest(expected.encode(), token.encode())
