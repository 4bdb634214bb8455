import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from dairy_auth.core.config import Settings
from dairy_auth.core.errors import ForbiddenError, UnauthorizedError
from dairy_auth.db.models import User
from dairy_auth.security.utils import decode_token
from dairy_auth.services.credentials import CredentialStore
from dairy_auth.services.notifier import ResetNotifier
from dairy_auth.services.sessions import SessionIssuer

security = HTTPBearer(auto_error=False)

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_db(request: Request):
    db = request.app.state.database.session()
    try: yield db
    finally: db.close()

def get_credentials(db: Session = Depends(get_db), cfg: Settings = Depends(get_settings)) -> CredentialStore:
    return CredentialStore(db, rounds=cfg.BCRYPT_ROUNDS)

def get_session_issuer(
    db: Session = Depends(get_db),
    credentials: CredentialStore = Depends(get_credentials),
    cfg: Settings = Depends(get_settings),
) -> SessionIssuer:
    return SessionIssuer(db, credentials, cfg)

def get_reset_notifier(request: Request) -> ResetNotifier:
    return request.app.state.reset_notifier

def get_current_user(
    creds: HTTPAuthorizationCredentials = Depends(security),
    credentials: CredentialStore = Depends(get_credentials),
    cfg: Settings = Depends(get_settings),
) -> User:
    if not creds: raise UnauthorizedError('Not authenticated')
    try:
        payload = decode_token(creds.credentials, cfg)
    except jwt.PyJWTError:
        raise UnauthorizedError('Invalid token')
    if payload.get('type') != 'access':
        raise UnauthorizedError('Invalid access token')
    user = credentials.find_by_id(payload.get('id') or '')
    if not user: raise UnauthorizedError('User not found')
    return user

def require_role(required: str):
    def _checker(user: User = Depends(get_current_user)):
        if user.role != required:
            raise ForbiddenError('Forbidden')
        return user
    return _checker
