"""Who is calling: a thin adapter over Flask-Login's ``current_user``."""
from dataclasses import dataclass, asdict
from typing import Callable, Optional

from flask_login import current_user

# Signed-out callers have no identity
ANONYMOUS = None


@dataclass(frozen=True)
class Identity:
    id: str
    display_name: str
    email: str

    def to_dict(self):
        return asdict(self)


def identity_for_user(user) -> Optional[Identity]:
    if user is None or not getattr(user, 'is_authenticated', False):
        return ANONYMOUS
    return Identity(id=str(user.id), display_name=user.display_name, email=user.email)


def current_identity() -> Optional[Identity]:
    return identity_for_user(current_user)


def admin_email_predicate(admin_email: str) -> Callable[[Optional[Identity]], bool]:
    """Build ``is_administrator(identity)`` for a single fixed email address."""
    expected = (admin_email or '').strip().lower()

    def is_administrator(identity: Optional[Identity]) -> bool:
        if identity is ANONYMOUS or not expected:
            return False
        return (identity.email or '').strip().lower() == expected

    return is_administrator
