from __future__ import annotations

import logging
from functools import wraps

from flask import request, g, abort, current_app

from utils.tokens import ACCESS, TokenError

logger = logging.getLogger(__name__)


def jwt_required():
    """
    Access guard for protected routes.
    401 when no bearer token is presented, 403 when it does not verify.
    Stateless: the token is never checked against the database.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                abort(401, description="No token provided")
            token = auth.split(" ", 1)[1].strip()
            if not token:
                abort(401, description="No token provided")
            try:
                claims = current_app.extensions["token_codec"].verify(token, ACCESS)
            except TokenError as e:
                # expiry and bad signature look the same from outside
                logger.debug("Access token rejected: %s", e)
                abort(403, description="Invalid or expired token")

            g.user_id = claims.user_id
            g.token_version = claims.token_version
            return fn(*args, **kwargs)

        return wrapper

    return decorator
