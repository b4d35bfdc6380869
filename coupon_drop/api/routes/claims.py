from __future__ import annotations

import math

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from coupon_drop.api.dependencies import get_claim_service
from coupon_drop.api.responses import failure_response, success_response
from coupon_drop.claims.errors import ClaimBlockedError, PoolExhaustedError, StoreUnavailableError
from coupon_drop.claims.identity import (
    IDENTITY_COOKIE_MAX_AGE_SECONDS,
    IDENTITY_COOKIE_NAME,
    resolve_identity,
)
from coupon_drop.claims.service import ClaimService
from coupon_drop.core.config import get_settings
from coupon_drop.services.request_guard import extract_client_ip

router = APIRouter(tags=["claims"])
logger = structlog.get_logger(__name__)


def format_wait_message(remaining_seconds: int) -> str:
    if remaining_seconds >= 120:
        minutes = math.ceil(remaining_seconds / 60)
        return f"Please wait {minutes} minutes before claiming again"
    unit = "second" if remaining_seconds == 1 else "seconds"
    return f"Please wait {remaining_seconds} {unit} before claiming again"


def _set_identity_cookie(response: JSONResponse, *, cookie_id: str, secure: bool) -> None:
    response.set_cookie(
        key=IDENTITY_COOKIE_NAME,
        value=cookie_id,
        max_age=IDENTITY_COOKIE_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        secure=secure,
    )


@router.get("/api/claim-coupon")
async def claim_coupon(
    request: Request,
    claim_service: ClaimService = Depends(get_claim_service),
) -> JSONResponse:
    settings = get_settings()
    identity = resolve_identity(
        client_ip=extract_client_ip(request, trusted_proxies=settings.trusted_proxies),
        cookie_value=request.cookies.get(IDENTITY_COOKIE_NAME),
        user_agent=request.headers.get("User-Agent"),
        pepper=settings.identity_pepper,
        composite_enabled=settings.composite_identity_enabled,
    )

    response: JSONResponse
    try:
        result = await claim_service.claim(identity)
    except ClaimBlockedError as exc:
        response = failure_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            message=format_wait_message(exc.remaining_seconds),
            remaining_seconds=exc.remaining_seconds,
        )
        response.headers["Retry-After"] = str(exc.remaining_seconds)
    except PoolExhaustedError:
        response = failure_response(status.HTTP_404_NOT_FOUND, message="No coupons available")
    except StoreUnavailableError:
        response = failure_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="Server error occurred",
        )
    else:
        response = success_response(
            status.HTTP_200_OK,
            message=f"Coupon {result.code_value} claimed successfully!",
            coupon=result.code_value,
        )

    if identity.cookie_issued:
        _set_identity_cookie(response, cookie_id=identity.cookie_id, secure=settings.cookie_secure)
    return response
