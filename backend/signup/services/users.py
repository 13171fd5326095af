from typing import Any, Dict, Optional

from flask import current_app

from signup import db
from signup.exceptions import ValidationFailed
from signup.models import User
from signup.services.games.clock import local_now
from signup.services.persistence import commit

_PROFILE_FIELDS = ('email', 'first_name', 'last_name', 'profile_image_url')


def get_user(user_id: str) -> Optional[User]:
    return db.session.get(User, user_id)


def upsert_user(claims: Dict[str, Any]) -> User:
    """Create or refresh a user from identity claims, keyed by ``sub``.

    Called on every login so profile changes at the identity provider are
    picked up. Missing profile claims leave stored values untouched.
    """
    if not isinstance(claims, dict):
        raise ValidationFailed('Identity claims must be an object')
    user_id = claims.get('sub') or claims.get('id')
    if not user_id:
        raise ValidationFailed('Identity claims must include a subject')
    user_id = str(user_id)

    user = get_user(user_id)
    created = user is None
    if created:
        user = User(id=user_id)
    for field in _PROFILE_FIELDS:
        if field in claims:
            setattr(user, field, claims[field])
    user.updated_at = local_now()
    db.session.add(user)
    commit('upsert-user', user=user_id)
    current_app.logger.info(f"[user-{'create' if created else 'update'}] user={user_id}")
    return user
