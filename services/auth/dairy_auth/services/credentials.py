import logging

from passlib.exc import PasswordValueError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dairy_auth.core.errors import ConflictError
from dairy_auth.db.models import User
from dairy_auth.security.utils import hash_password, now_utc, password_context, verify_password

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialStore:
    """User identities and their bcrypt password hashes.

    Emails are stored and looked up lowercased, so uniqueness ignores case.
    """

    def __init__(self, db: Session, rounds: int = 12):
        self.db = db
        self.rounds = rounds

    def create(self, id: str, name: str, email: str, raw_password: str, role: str) -> User:
        user = User(
            id=id,
            name=name,
            email=normalize_email(email),
            password_hash=hash_password(raw_password, self.rounds),
            role=role,
            created_at=now_utc(),
            updated_at=now_utc(),
        )
        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration for the same email.
            self.db.rollback()
            raise ConflictError('Email exists') from exc
        logger.info('Created user %s with role %s', user.id, user.role)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_id(self, user_id: str) -> User | None:
        return self.db.get(User, user_id)

    def verify_password(self, raw_password: str, stored_hash: str) -> bool:
        try:
            return verify_password(raw_password, stored_hash, self.rounds)
        except PasswordValueError:
            # bcrypt cannot hash this value (e.g. NUL bytes), so it never matches.
            return False

    def dummy_verify(self) -> None:
        password_context(self.rounds).dummy_verify()
