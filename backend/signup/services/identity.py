"""Signed identity assertions handed over by the identity provider.

The provider signs the user's claims with ``IDENTITY_SECRET``; ``/api/login``
only accepts claims whose signature and age check out.
"""

from typing import Any, Dict

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from signup.exceptions import Unauthenticated

_SALT = 'signup-identity'


def _serializer() -> URLSafeTimedSerializer:
    cfg = current_app.config
    secret = cfg.get('IDENTITY_SECRET') or cfg['SECRET_KEY']
    return URLSafeTimedSerializer(secret, salt=_SALT)


def issue_identity_token(claims: Dict[str, Any]) -> str:
    return _serializer().dumps(claims)


def verify_identity_token(token) -> Dict[str, Any]:
    """Return the signed claims or raise ``Unauthenticated``."""
    if not isinstance(token, str) or not token:
        raise Unauthenticated('A signed identity token is required')
    max_age = int(current_app.config.get('IDENTITY_TOKEN_MAX_AGE', 300))
    try:
        claims = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        raise Unauthenticated('Identity token has expired')
    except BadSignature:
        current_app.logger.warning('[login-reject] bad identity token signature')
        raise Unauthenticated('Identity token is invalid')
    if not isinstance(claims, dict):
        raise Unauthenticated('Identity token is invalid')
    return claims
