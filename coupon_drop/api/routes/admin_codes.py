from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, StrictStr

from coupon_drop.api.dependencies import get_pool_admin
from coupon_drop.api.responses import failure_response, success_response
from coupon_drop.claims.admin import MAX_CODE_LENGTH, CodePoolAdmin
from coupon_drop.claims.errors import DuplicateCodeError, InvalidInputError, StoreUnavailableError
from coupon_drop.core.config import get_settings
from coupon_drop.services.request_guard import is_admin_request_authenticated

router = APIRouter(tags=["admin"])
logger = structlog.get_logger(__name__)
MAX_BULK_CODES = 1000


class AddCodeRequest(BaseModel):
    code: StrictStr = Field(min_length=1, max_length=MAX_CODE_LENGTH)


class AddCodesRequest(BaseModel):
    codes: list[StrictStr] = Field(max_length=MAX_BULK_CODES)


def _assert_admin_access(request: Request) -> None:
    settings = get_settings()
    if not is_admin_request_authenticated(request, expected_token=settings.admin_api_token):
        logger.warning("admin_auth_failed", path=request.url.path)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def _store_failure() -> JSONResponse:
    return failure_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message="Server error occurred")


@router.post("/api/codes")
async def add_code(
    payload: AddCodeRequest,
    request: Request,
    pool_admin: CodePoolAdmin = Depends(get_pool_admin),
) -> JSONResponse:
    _assert_admin_access(request)
    try:
        code = await pool_admin.add_code(payload.code)
    except DuplicateCodeError:
        return failure_response(status.HTTP_400_BAD_REQUEST, message="Coupon code already exists")
    except InvalidInputError as exc:
        return failure_response(status.HTTP_400_BAD_REQUEST, message=str(exc))
    except StoreUnavailableError:
        return _store_failure()

    return success_response(
        status.HTTP_201_CREATED,
        message=f"Coupon {code.value} added successfully",
        coupon={"value": code.value, "status": code.status, "created_at": code.created_at},
    )


@router.post("/api/codes/bulk")
async def add_codes(
    payload: AddCodesRequest,
    request: Request,
    pool_admin: CodePoolAdmin = Depends(get_pool_admin),
) -> JSONResponse:
    _assert_admin_access(request)
    try:
        result = await pool_admin.add_codes(payload.codes)
    except InvalidInputError as exc:
        return failure_response(status.HTTP_400_BAD_REQUEST, message=str(exc))
    except StoreUnavailableError:
        return _store_failure()

    return success_response(
        status.HTTP_201_CREATED,
        message=f"{len(result.added)} coupons added",
        added=result.added,
        skipped=result.skipped,
    )


@router.get("/api/codes/stats")
async def get_code_stats(
    request: Request,
    pool_admin: CodePoolAdmin = Depends(get_pool_admin),
) -> JSONResponse:
    _assert_admin_access(request)
    try:
        stats = await pool_admin.stats()
    except StoreUnavailableError:
        return _store_failure()

    return success_response(
        status.HTTP_200_OK,
        message="Pool statistics",
        total=stats.total,
        available=stats.available,
        claimed=stats.claimed,
    )


@router.delete("/api/cooldowns")
async def reset_cooldowns(
    request: Request,
    pool_admin: CodePoolAdmin = Depends(get_pool_admin),
) -> JSONResponse:
    _assert_admin_access(request)
    if get_settings().app_env == "prod":
        return failure_response(
            status.HTTP_403_FORBIDDEN,
            message="Cooldown reset is disabled in production",
        )
    try:
        deleted = await pool_admin.reset_cooldowns()
    except StoreUnavailableError:
        return _store_failure()

    return success_response(status.HTTP_200_OK, message="Cooldowns cleared", deleted=deleted)
