import sentry_sdk
from fastapi import Request
from typing import Any

from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration


def init_sentry(dsn: str, environment: str, release: str, debug: bool) -> None:
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=1.0 if debug else 0.1,
        environment=environment,
        release=release,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
    )


def set_user_context(user_id: int, username: str | None = None):
    sentry_sdk.set_user({"id": user_id, "username": username})


def capture_exception_with_context(
    error: Exception, request: Request | None = None, context: dict[str, Any] | None = None
):
    if request is not None:
        sentry_sdk.set_context(
            "request",
            {
                "url": str(request.url),
                "method": request.method,
                "query_params": dict(request.query_params),
            },
        )
    if context:
        for key, value in context.items():
            sentry_sdk.set_context(key, value)

    sentry_sdk.capture_exception(error)


def add_breadcrumb(
    message: str,
    category: str = "default",
    level: str = "info",
    data: dict[str, Any] | None = None,
):
    sentry_sdk.add_breadcrumb(
        message=message, category=category, level=level, data=data or {}
    )
