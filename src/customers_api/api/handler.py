"""Customer HTTP handlers — map endpoints onto repository operations."""

from __future__ import annotations

import logging
import re
from http import HTTPStatus

from fastapi import APIRouter, Depends, Form, HTTPException, Request

from customers_api.database.repository import (
    CustomerNotFoundError,
    CustomerRepository,
    CustomerStorageError,
)
from customers_api.schemas.customer import CustomerOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["customers"])

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def get_repository(request: Request) -> CustomerRepository:
    """Return the repository created for this app at startup."""
    return request.app.state.customers


def first_query_id(request: Request) -> str | None:
    """Return the first ``id`` query value; later duplicates are ignored."""
    values = request.query_params.getlist("id")
    return values[0] if values else None


def _error(status: HTTPStatus) -> HTTPException:
    return HTTPException(status_code=status.value, detail=status.phrase)


def _parse_id(raw: str | None) -> int:
    """Parse a signed decimal 64-bit identifier or fail with 400."""
    if raw is None or not _INT_RE.fullmatch(raw):
        logger.warning("Invalid customer id %r", raw)
        raise _error(HTTPStatus.BAD_REQUEST)
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        logger.warning("Customer id out of range: %s", raw)
        raise _error(HTTPStatus.BAD_REQUEST)
    return value


async def _run(operation, *args) -> CustomerOut | list[CustomerOut]:
    """Await a repository call, translating its errors into HTTP statuses."""
    try:
        return await operation(*args)
    except CustomerNotFoundError as exc:
        logger.info("%s", exc)
        raise _error(HTTPStatus.NOT_FOUND) from exc
    except CustomerStorageError as exc:
        logger.error("%s failed: %s", operation.__name__, exc)
        raise _error(HTTPStatus.INTERNAL_SERVER_ERROR) from exc


# ──────────────────────────────────────────────────────────────
# Lookups
# ──────────────────────────────────────────────────────────────
@router.get("/customers.getById", response_model=CustomerOut)
async def get_by_id(
    raw_id: str | None = Depends(first_query_id),
    repo: CustomerRepository = Depends(get_repository),
):
    """Return a single customer."""
    return await _run(repo.by_id, _parse_id(raw_id))


@router.get("/customers.getAll", response_model=list[CustomerOut])
async def get_all(repo: CustomerRepository = Depends(get_repository)):
    """Return every customer."""
    return await _run(repo.all)


@router.get("/customers.getAllActive", response_model=list[CustomerOut])
async def get_all_active(repo: CustomerRepository = Depends(get_repository)):
    """Return every customer that is not blocked."""
    return await _run(repo.all_active)


# ──────────────────────────────────────────────────────────────
# Mutations
# ──────────────────────────────────────────────────────────────
@router.post("/customers.save", response_model=CustomerOut)
async def save(
    raw_id: str = Form("", alias="id"),
    name: str = Form(""),
    phone: str = Form(""),
    repo: CustomerRepository = Depends(get_repository),
):
    """Create a customer (no ``id``, upsert on phone) or update one by ``id``."""
    customer_id = _parse_id(raw_id) if raw_id else 0
    if not name and not phone:
        logger.warning("Refusing to save a customer without name and phone")
        raise _error(HTTPStatus.BAD_REQUEST)
    return await _run(repo.save, customer_id, name, phone)


@router.get("/customers.removeById", response_model=CustomerOut)
async def remove_by_id(
    raw_id: str | None = Depends(first_query_id),
    repo: CustomerRepository = Depends(get_repository),
):
    """Delete a customer and return it."""
    return await _run(repo.remove_by_id, _parse_id(raw_id))


@router.get("/customers.blockById", response_model=CustomerOut)
async def block_by_id(
    raw_id: str | None = Depends(first_query_id),
    repo: CustomerRepository = Depends(get_repository),
):
    """Block a customer. The response shows the customer before blocking."""
    return await _run(repo.block_by_id, _parse_id(raw_id))


@router.get("/customers.unblockById", response_model=CustomerOut)
async def unblock_by_id(
    raw_id: str | None = Depends(first_query_id),
    repo: CustomerRepository = Depends(get_repository),
):
    """Unblock a customer. The response shows the customer before unblocking."""
    return await _run(repo.unblock_by_id, _parse_id(raw_id))
