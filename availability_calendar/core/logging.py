import logging
import json
import time
from datetime import datetime, timezone
from fastapi import Request
from availability_calendar.config import settings
from availability_calendar.core.sentry_helpers import add_breadcrumb


def get_client_ip(request: Request) -> str:
    return (
        request.headers.get("x-forwarded-for", "").split(",")[0].strip()
        or request.headers.get("x-real-ip", "")
        or getattr(request.client, "host", "unknown")
        if request.client
        else "unknown"
    )


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "unknown")


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

security_logger = logging.getLogger("security")
auth_logger = logging.getLogger("auth")
availability_logger = logging.getLogger("availability")


def _base_log_data(request: Request, event_type: str) -> dict[str, object]:
    return {
        "event_type": event_type,
        "ip_address": get_client_ip(request),
        "user_agent": get_user_agent(request),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class SecurityLogger:
    @staticmethod
    def log_login_attempt(
        request: Request,
        email: str,
        success: bool,
        user_id: int | None = None,
        failure_reason: str | None = None,
        additional_data: dict[str, object] | None = None,
    ):
        log_data = _base_log_data(request, "login_attempt")
        log_data.update({"email": email, "success": success})

        if user_id:
            log_data["user_id"] = user_id
        if failure_reason:
            log_data["failure_reason"] = failure_reason
        if additional_data:
            log_data.update(additional_data)

        message = (
            f"Login {'successful' if success else 'failed'}: {json.dumps(log_data)}"
        )

        if success:
            auth_logger.info(message)
        else:
            auth_logger.warning(message)

    @staticmethod
    def log_registration(
        request: Request,
        email: str,
        user_id: int | None = None,
        success: bool = True,
        failure_reason: str | None = None,
    ):
        log_data = _base_log_data(request, "user_registration")
        log_data.update({"email": email, "success": success})

        if user_id:
            log_data["user_id"] = user_id
        if failure_reason:
            log_data["failure_reason"] = failure_reason

        message = f"Registration {'successful' if success else 'failed'}: {json.dumps(log_data)}"

        if success:
            auth_logger.info(message)
        else:
            auth_logger.warning(message)

    @staticmethod
    def log_suspicious_activity(
        request: Request,
        activity_type: str,
        user_id: int | None = None,
        details: dict[str, object] | None = None,
    ):
        log_data = _base_log_data(request, "suspicious_activity")
        log_data["activity_type"] = activity_type

        if user_id:
            log_data["user_id"] = str(user_id)
        if details:
            log_data.update(details)

        security_logger.warning(f"Suspicious activity detected: {json.dumps(log_data)}")

    @staticmethod
    def log_rate_limit_exceeded(
        request: Request,
        limit_type: str,
        user_id: int | None = None,
        details: dict[str, object] | None = None,
    ):
        log_data = _base_log_data(request, "rate_limit_exceeded")
        log_data["limit_type"] = limit_type

        if user_id is not None:
            log_data["user_id"] = str(user_id)
        if details is not None:
            log_data.update(details)

        security_logger.warning(f"Rate limit exceeded: {json.dumps(log_data)}")
        add_breadcrumb(
            f"Rate limit exceeded: {limit_type}",
            category="security",
            level="warning",
            data=log_data,
        )


class AvailabilityLogger:
    @staticmethod
    def log_toggle(
        request: Request, user_id: int | None, date: str, is_unavailable: bool
    ):
        log_data = _base_log_data(request, "availability_toggle")
        log_data.update(
            {"user_id": user_id, "date": date, "is_unavailable": is_unavailable}
        )
        availability_logger.info(f"Availability toggled: {json.dumps(log_data)}")


class SimpleRateLimiter:
    def __init__(self):
        self._attempts: dict[str, list[float]] = {}
        self._lockouts: dict[str, float] = {}

    def _prune(self, now: float, window_seconds: int) -> None:
        # drop keys with no attempt inside the window and no running lockout
        for key in list(self._attempts):
            if key in self._lockouts and now < self._lockouts[key]:
                continue
            if not any(now - timestamp < window_seconds for timestamp in self._attempts[key]):
                del self._attempts[key]
                self._lockouts.pop(key, None)

    def check_and_record_attempt(
        self,
        key: str,
        max_attempts: int = 5,
        window_seconds: int = 300,
        lockout_seconds: int = 900,
    ) -> dict[str, object]:
        if not settings.RATE_LIMIT_ENABLED:
            return {"allowed": True, "attempts": 0, "remaining": max_attempts}

        now = time.time()
        self._prune(now, window_seconds)

        if key in self._lockouts:
            if now < self._lockouts[key]:
                return {
                    "allowed": False,
                    "reason": "locked_out",
                    "retry_after": int(self._lockouts[key] - now),
                }
            del self._lockouts[key]

        attempts = [
            timestamp
            for timestamp in self._attempts.get(key, [])
            if now - timestamp < window_seconds
        ]

        if len(attempts) >= max_attempts:
            self._lockouts[key] = now + lockout_seconds
            self._attempts[key] = attempts
            return {
                "allowed": False,
                "reason": "too_many_attempts",
                "attempts": len(attempts),
                "retry_after": lockout_seconds,
            }

        attempts.append(now)
        self._attempts[key] = attempts

        return {
            "allowed": True,
            "attempts": len(attempts),
            "remaining": max_attempts - len(attempts),
        }

    def reset(self, key: str) -> None:
        self._attempts.pop(key, None)
        self._lockouts.pop(key, None)


rate_limiter = SimpleRateLimiter()
