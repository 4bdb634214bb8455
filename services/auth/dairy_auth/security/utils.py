from functools import lru_cache
from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
import jwt, hashlib, secrets
from typing import Tuple
from dairy_auth.core.config import Settings, settings


@lru_cache(maxsize=None)
def password_context(rounds: int = 12) -> CryptContext:
    return CryptContext(schemes=['bcrypt'], deprecated='auto', bcrypt__rounds=rounds)

def hash_password(p: str, rounds: int = 12) -> str: return password_context(rounds).hash(p)

def verify_password(p: str, h: str, rounds: int = 12) -> bool: return password_context(rounds).verify(p, h)

def now_utc() -> datetime: return datetime.now(timezone.utc).replace(tzinfo=None)

def token_sha256(t: str) -> str: return hashlib.sha256(t.encode('utf-8')).hexdigest()

def create_access_token(user_id: str, role: str, cfg: Settings = settings) -> Tuple[str, datetime]:
    iat = now_utc()
    exp = iat + timedelta(seconds=cfg.ACCESS_TOKEN_EXPIRES_SECONDS)
    payload = {'id': user_id, 'role': role, 'iat': iat, 'exp': exp, 'type': 'access'}
    return jwt.encode(payload, cfg.JWT_SECRET, algorithm=cfg.JWT_ALGORITHM), exp

def create_refresh_token(cfg: Settings = settings) -> Tuple[str, datetime]:
    # Opaque 512-bit value; only its sha256 digest is stored.
    exp = now_utc() + timedelta(days=cfg.REFRESH_TOKEN_EXPIRES_DAYS)
    return secrets.token_hex(64), exp

def decode_token(token: str, cfg: Settings = settings) -> dict:
    return jwt.decode(token, cfg.JWT_SECRET, algorithms=[cfg.JWT_ALGORITHM])
