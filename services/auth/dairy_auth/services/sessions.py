"""Access/refresh token issuance, rotation and revocation.

An access token is a signed JWT and is never stored. A refresh token is an
opaque random string; its sha256 digest is stored in ``refresh_tokens`` and
each row is consumed by exactly one successful refresh.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.orm import Session

from dairy_auth.core.config import Settings
from dairy_auth.core.errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from dairy_auth.db.models import RefreshToken, Role, User
from dairy_auth.security.utils import create_access_token, create_refresh_token, now_utc, token_sha256
from dairy_auth.services.credentials import CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime
    user: User


def new_user_id() -> str:
    return f'USR_{uuid.uuid4().hex}'


class SessionIssuer:
    def __init__(self, db: Session, credentials: CredentialStore, cfg: Settings):
        self.db = db
        self.credentials = credentials
        self.cfg = cfg

    def register(self, name: str, email: str, password: str) -> IssuedSession:
        if self.credentials.find_by_email(email):
            raise ConflictError('Email exists')
        user = self.credentials.create(new_user_id(), name, email, password, Role.FARMER.value)
        issued = self._issue(user)
        self.db.commit()
        return issued

    def login(self, email: str, password: str) -> IssuedSession:
        user = self.credentials.find_by_email(email)
        if user is None:
            self.credentials.dummy_verify()
            logger.warning('Login failed: unknown email')
            raise UnauthorizedError('Invalid credentials')
        if not self.credentials.verify_password(password, user.password_hash):
            logger.warning('Login failed: bad password for user %s', user.id)
            raise UnauthorizedError('Invalid credentials')
        issued = self._issue(user)
        self.db.commit()
        return issued

    def refresh(self, presented: str | None) -> IssuedSession:
        if not presented:
            raise UnauthorizedError('No refresh token')

        stored = self._find_token(presented)
        if stored is None:
            logger.warning('Refresh rejected: unknown token')
            raise ForbiddenError('Invalid refresh token')
        if stored.expires_at < now_utc():
            logger.warning('Refresh rejected: expired token for user %s', stored.user_id)
            self._consume(stored)
            self.db.commit()
            raise ForbiddenError('Invalid refresh token')

        user_id = stored.user_id
        if not self._consume(stored):
            self.db.rollback()
            logger.warning('Refresh rejected: token for user %s already consumed', user_id)
            raise ForbiddenError('Invalid refresh token')

        user = self.credentials.find_by_id(user_id)
        if user is None:
            self.db.commit()
            raise ForbiddenError('Invalid refresh token')

        issued = self._issue(user)
        self.db.commit()
        return issued

    def logout(self, presented: str | None) -> None:
        if not presented:
            return
        self.db.execute(delete(RefreshToken).where(RefreshToken.token_hash == token_sha256(presented)))
        self.db.commit()

    def forgot_password(self, email: str) -> User:
        user = self.credentials.find_by_email(email)
        if user is None:
            raise NotFoundError('No account found with this email address')
        return user

    def _find_token(self, presented: str) -> RefreshToken | None:
        return (
            self.db.query(RefreshToken)
            .filter(RefreshToken.token_hash == token_sha256(presented))
            .first()
        )

    def _consume(self, stored: RefreshToken) -> bool:
        # The row delete is the arbiter between concurrent refreshes of one token.
        # Match on the digest too: a freed integer id can be reused by the winner's new row.
        result = self.db.execute(
            delete(RefreshToken).where(
                RefreshToken.id == stored.id,
                RefreshToken.token_hash == stored.token_hash,
            )
        )
        return result.rowcount == 1

    def _issue(self, user: User) -> IssuedSession:
        access_token, _ = create_access_token(user.id, user.role, self.cfg)
        refresh_token, expires_at = create_refresh_token(self.cfg)
        self.db.add(
            RefreshToken(
                user_id=user.id,
                token_hash=token_sha256(refresh_token),
                expires_at=expires_at,
                created_at=now_utc(),
            )
        )
        self.db.flush()
        logger.info('Issued session for user %s', user.id)
        return IssuedSession(access_token, refresh_token, expires_at, user)
