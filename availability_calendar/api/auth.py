from fastapi import APIRouter, Cookie, HTTPException, Request, Response, status

from availability_calendar.config import settings
from availability_calendar.core.auth import ACCESS_TOKEN_EXPIRE_MINUTES, REFRESH_TOKEN_EXPIRE_DAYS
from availability_calendar.core.dependencies import CurrentUser, DatabaseSession
from availability_calendar.core.logging import SecurityLogger, get_client_ip, rate_limiter
from availability_calendar.core.middleware import limiter
from availability_calendar.schemas.auth import (
    TokenRefresh,
    TokenResponse,
    UserLogin,
    UserRegister,
)
from availability_calendar.schemas.common import ErrorResponse
from availability_calendar.schemas.user import UserPrivate
from availability_calendar.services.auth import AuthService

router = APIRouter()


def _set_auth_cookies(response: Response, tokens: TokenResponse) -> None:
    response.set_cookie(
        key="access_token",
        value=tokens.access_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )
    response.set_cookie(
        key="refresh_token",
        value=tokens.refresh_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600,
        path="/api/auth",
    )


@router.post(
    "/register",
    response_model=UserPrivate,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "model": ErrorResponse,
            "description": "Email or display name already exists",
        },
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    },
)
@limiter.limit("5/minute")
async def register(
    request: Request,
    user_data: UserRegister,
    db: DatabaseSession,
) -> UserPrivate:
    auth_service = AuthService(db)

    try:
        user = await auth_service.register_user(user_data)
    except HTTPException as e:
        SecurityLogger.log_registration(
            request,
            email=user_data.email,
            success=False,
            failure_reason=str(e.detail),
        )
        raise

    SecurityLogger.log_registration(request, email=user.email, user_id=user.id)

    return UserPrivate.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account inactive"},
        423: {"model": ErrorResponse, "description": "Account temporarily locked"},
    },
)
@limiter.limit("10/minute")
async def login(
    request: Request,
    response: Response,
    login_data: UserLogin,
    db: DatabaseSession,
) -> TokenResponse:
    auth_service = AuthService(db)
    limiter_key = f"login:{get_client_ip(request)}:{login_data.email}"

    rate_check = rate_limiter.check_and_record_attempt(
        limiter_key,
        max_attempts=settings.LOGIN_MAX_ATTEMPTS,
        window_seconds=900,
        lockout_seconds=settings.LOGIN_LOCKOUT_SECONDS,
    )

    if not rate_check["allowed"]:
        SecurityLogger.log_rate_limit_exceeded(
            request,
            "login",
            details={
                "email": login_data.email,
                "reason": rate_check["reason"],
                "retry_after": rate_check["retry_after"],
            },
        )
        raise HTTPException(
            status_code=status.HTTP_423_LOCKED,
            detail=f"Account temporarily locked due to too many failed attempts. Try again in {rate_check['retry_after']} seconds.",
            headers={"Retry-After": str(rate_check["retry_after"])},
        )

    user = await auth_service.authenticate_user(login_data.email, login_data.password)

    if not user:
        SecurityLogger.log_login_attempt(
            request,
            email=login_data.email,
            success=False,
            failure_reason="invalid_credentials",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    if not user.is_active:
        SecurityLogger.log_login_attempt(
            request,
            email=login_data.email,
            success=False,
            user_id=user.id,
            failure_reason="account_inactive",
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated"
        )

    rate_limiter.reset(limiter_key)
    SecurityLogger.log_login_attempt(
        request, email=user.email, success=True, user_id=user.id
    )

    tokens = await auth_service.create_tokens(user)
    _set_auth_cookies(response, tokens)

    return tokens


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid refresh token"}},
)
@limiter.limit("20/minute")
async def refresh_token(
    request: Request,
    response: Response,
    db: DatabaseSession,
    token_data: TokenRefresh | None = None,
    refresh_token: str | None = Cookie(None),
) -> TokenResponse:
    token = token_data.refresh_token if token_data else refresh_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="No refresh token"
        )

    auth_service = AuthService(db)

    try:
        tokens = await auth_service.refresh_access_token(token)
    except HTTPException as e:
        SecurityLogger.log_suspicious_activity(
            request,
            "token_refresh_failed",
            details={"action": "failed_token_refresh", "error": str(e.detail)},
        )
        raise

    _set_auth_cookies(response, tokens)
    return tokens


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={401: {"model": ErrorResponse, "description": "Authentication required"}},
)
async def logout(
    request: Request,
    response: Response,
    current_user: CurrentUser,
    db: DatabaseSession,
    token_data: TokenRefresh | None = None,
    refresh_token: str | None = Cookie(None),
) -> None:
    token = token_data.refresh_token if token_data else refresh_token
    if token:
        await AuthService(db).revoke_refresh_token(current_user.id, token)

    response.delete_cookie(key="access_token", path="/")
    response.delete_cookie(key="refresh_token", path="/api/auth")

    SecurityLogger.log_login_attempt(
        request,
        email=current_user.email,
        success=True,
        user_id=current_user.id,
        additional_data={"action": "user_logout"},
    )
