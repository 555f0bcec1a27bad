# utils/jwt_utils.py
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, request

from errors import AuthenticationError, PermissionDenied

JWT_ALGO = "HS256"


def create_auth_token(user_id, role, secret, ttl_seconds):
    """
    Create a signed JWT for an authenticated caller. Contains:
      - id, role
      - iat, exp
    """
    now = datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGO)


def verify_auth_token(token, secret):
    """
    Returns decoded payload if valid, else raises AuthenticationError.
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGO])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Login expired, sign in again") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid token") from e
    if "id" not in payload or "role" not in payload:
        raise AuthenticationError("Invalid token")
    return payload


def login_required(*roles):
    """Route decorator: require a Bearer token, optionally for one of ``roles``.

    The decoded caller is exposed as ``g.user``.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            header = request.headers.get("Authorization", "")
            if not header.startswith("Bearer "):
                raise AuthenticationError("No token provided")
            g.user = verify_auth_token(header[len("Bearer "):], current_app.config["JWT_SECRET"])
            if roles and g.user["role"] not in roles:
                raise PermissionDenied(f"{' or '.join(r.title() for r in roles)} access required")
            return view(*args, **kwargs)
        return wrapper
    return decorator
