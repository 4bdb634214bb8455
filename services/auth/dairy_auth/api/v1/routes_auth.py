from fastapi import APIRouter, Depends, Request, Response, status

from dairy_auth.api.deps import get_reset_notifier, get_session_issuer, get_settings
from dairy_auth.api.v1.schemas import (
    RegisterPayload,
    LoginPayload,
    ForgotPasswordPayload,
    AuthResponse,
    AccessTokenResponse,
    MessageResponse,
    UserRead,
)
from dairy_auth.core.config import Settings
from dairy_auth.security.utils import now_utc
from dairy_auth.services.notifier import ResetNotifier, ResetRequest
from dairy_auth.services.sessions import IssuedSession, SessionIssuer

router = APIRouter()  # main.py mounts at /auth


def set_refresh_cookie(response: Response, token: str, cfg: Settings) -> None:
    response.set_cookie(
        key=cfg.REFRESH_COOKIE_NAME,
        value=token,
        max_age=cfg.refresh_cookie_max_age,
        path=cfg.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=cfg.COOKIE_SECURE,
        samesite="strict",
    )


def clear_refresh_cookie(response: Response, cfg: Settings) -> None:
    response.delete_cookie(
        key=cfg.REFRESH_COOKIE_NAME,
        path=cfg.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=cfg.COOKIE_SECURE,
        samesite="strict",
    )


def _auth_response(issued: IssuedSession, response: Response, cfg: Settings) -> AuthResponse:
    set_refresh_cookie(response, issued.refresh_token, cfg)
    return AuthResponse(access_token=issued.access_token, user=UserRead.model_validate(issued.user))


@router.post("/register", response_model=AuthResponse)
def register(
    payload: RegisterPayload,
    response: Response,
    issuer: SessionIssuer = Depends(get_session_issuer),
    cfg: Settings = Depends(get_settings),
) -> AuthResponse:
    issued = issuer.register(payload.name, str(payload.email), payload.password)
    return _auth_response(issued, response, cfg)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginPayload,
    response: Response,
    issuer: SessionIssuer = Depends(get_session_issuer),
    cfg: Settings = Depends(get_settings),
) -> AuthResponse:
    issued = issuer.login(str(payload.email), payload.password)
    return _auth_response(issued, response, cfg)


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh_token(
    request: Request,
    response: Response,
    issuer: SessionIssuer = Depends(get_session_issuer),
    cfg: Settings = Depends(get_settings),
) -> AccessTokenResponse:
    issued = issuer.refresh(request.cookies.get(cfg.REFRESH_COOKIE_NAME))
    set_refresh_cookie(response, issued.refresh_token, cfg)
    return AccessTokenResponse(access_token=issued.access_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    request: Request,
    issuer: SessionIssuer = Depends(get_session_issuer),
    cfg: Settings = Depends(get_settings),
) -> Response:
    issuer.logout(request.cookies.get(cfg.REFRESH_COOKIE_NAME))
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_refresh_cookie(response, cfg)
    return response


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordPayload,
    issuer: SessionIssuer = Depends(get_session_issuer),
    notifier: ResetNotifier = Depends(get_reset_notifier),
) -> MessageResponse:
    user = issuer.forgot_password(str(payload.email))
    notifier.send(ResetRequest(user_id=user.id, email=user.email, requested_at=now_utc()))
    return MessageResponse(msg="Password reset instructions sent to your email")
