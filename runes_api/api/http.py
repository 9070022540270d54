"""REST endpoints exposing indexed rune state."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, Response
from sqlalchemy.engine import Engine

from runes_api import __version__
from runes_api.api.assemblers import assemble_activity, assemble_balance, assemble_etching
from runes_api.api.cache import check_freshness
from runes_api.api.logging_utils import log_operation
from runes_api.api.schemas import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    ActivityResponse,
    ApiStatusResponse,
    BalanceResponse,
    ErrorResponse,
    EtchingResponse,
    NotFoundResponse,
    PaginatedResponse,
    PaginationParams,
)
from runes_api.runes.errors import NotFoundError
from runes_api.runes.identifiers import (
    BLOCK_HASH_RE,
    TX_ID_RE,
    RuneFilter,
    normalize_tx_id,
    resolve_block,
    resolve_rune,
)
from runes_api.runes.models import ChainTip, Page
from runes_api.runes.store import RuneQueryStore, read_snapshot

router = APIRouter()
LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

BLOCK_PATTERN = rf"^([0-9]+|{BLOCK_HASH_RE.pattern[1:-1]})$"
ERRORS = {
    400: {"model": ErrorResponse, "description": "Bad request"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}
NOT_FOUND = {**ERRORS, 404: {"model": NotFoundResponse, "description": "Not found"}}
SERVER_VERSION = f"runes-api v{__version__}"


def get_engine(request: Request) -> Engine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return engine


def pagination(
    offset: int = Query(0, ge=0, description="Result offset"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Results per page"),
) -> PaginationParams:
    return PaginationParams(offset=offset, limit=limit)


def _serve(
    request: Request,
    response: Response,
    engine: Engine,
    operation: str,
    build: Callable[[RuneQueryStore, Optional[ChainTip]], Any],
    **context: object,
) -> Any:
    """Run the cache gate and ``build`` against one read snapshot.

    Parameters are already validated by the time this runs, so no invalid
    request reaches the store.
    """

    with log_operation(LOGGER, operation, request=request, **context) as ctx:
        with read_snapshot(engine) as connection:
            store = RuneQueryStore(connection)
            freshness = check_freshness(request, response, store)
            if freshness.not_modified:
                ctx["cache"] = "not_modified"
                return freshness.not_modified_response()
            result = build(store, freshness.chain_tip)
        if isinstance(result, PaginatedResponse):
            ctx.update({"total": result.total, "returned": len(result.results)})
        return result


def _envelope(page: PaginationParams, result: Page[T], assemble: Callable[[T], Any]) -> PaginatedResponse:
    return PaginatedResponse(
        limit=page.limit,
        offset=page.offset,
        total=result.total,
        results=[assemble(item) for item in result.results],
    )


def _require_rune(store: RuneQueryStore, flt: RuneFilter, result: Page[T], etching: str) -> Page[T]:
    """An empty rune-scoped page is only valid for a rune that exists."""

    if result.total == 0 and store.get_etching(flt) is None:
        raise NotFoundError("Etching not found", context={"etching": etching})
    return result


def _tip_height(chain_tip: Optional[ChainTip]) -> Optional[str]:
    return chain_tip.block_height if chain_tip is not None else None


# ----- status -----


@router.get(
    "/",
    response_model=ApiStatusResponse,
    response_model_exclude_unset=True,
    responses=ERRORS,
    summary="API Status",
    description="Displays the status of the API",
    tags=["Status"],
)
def get_api_status(
    request: Request,
    response: Response,
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> ApiStatusResponse:
        status = {"server_version": SERVER_VERSION, "status": "ready"}
        if chain_tip is not None:
            status["block_height"] = int(chain_tip.block_height)
        return ApiStatusResponse(**status)

    return _serve(request, response, engine, "api_status", build)


# ----- etchings -----


@router.get(
    "/etchings",
    response_model=PaginatedResponse[EtchingResponse],
    response_model_exclude_unset=True,
    responses=ERRORS,
    summary="Rune etchings",
    description="Retrieves a paginated list of rune etchings",
    tags=["Etchings"],
)
def get_etchings(
    request: Request,
    response: Response,
    page: PaginationParams = Depends(pagination),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> PaginatedResponse:
        result = store.get_etchings(page.offset, page.limit)
        tip = _tip_height(chain_tip)
        return _envelope(page, result, lambda etching: assemble_etching(etching, tip))

    return _serve(
        request, response, engine, "etchings", build, offset=page.offset, limit=page.limit
    )


@router.get(
    "/etchings/{etching}",
    response_model=EtchingResponse,
    response_model_exclude_unset=True,
    responses=NOT_FOUND,
    summary="Rune etching",
    description="Retrieves information for a Rune etching",
    tags=["Etchings"],
)
def get_etching(
    request: Request,
    response: Response,
    etching: str = Path(..., description="Rune ID, number, name or spaced name"),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> EtchingResponse:
        record = store.get_etching(resolve_rune(etching))
        if record is None:
            raise NotFoundError("Etching not found", context={"etching": etching})
        return assemble_etching(record, _tip_height(chain_tip))

    return _serve(request, response, engine, "etching", build, etching=etching)


@router.get(
    "/etchings/{etching}/activity",
    response_model=PaginatedResponse[ActivityResponse],
    response_model_exclude_unset=True,
    responses=NOT_FOUND,
    summary="Rune activity",
    description="Retrieves all activity for a Rune",
    tags=["Activity"],
)
def get_rune_activity(
    request: Request,
    response: Response,
    etching: str = Path(..., description="Rune ID, number, name or spaced name"),
    page: PaginationParams = Depends(pagination),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> PaginatedResponse:
        flt = resolve_rune(etching)
        result = store.get_rune_activity(flt, page.offset, page.limit)
        return _envelope(page, _require_rune(store, flt, result, etching), assemble_activity)

    return _serve(
        request,
        response,
        engine,
        "rune_activity",
        build,
        etching=etching,
        offset=page.offset,
        limit=page.limit,
    )


@router.get(
    "/etchings/{etching}/activity/{address}",
    response_model=PaginatedResponse[ActivityResponse],
    response_model_exclude_unset=True,
    responses=NOT_FOUND,
    summary="Rune activity for address",
    description="Retrieves all Rune activity for a Bitcoin address",
    tags=["Activity"],
)
def get_rune_address_activity(
    request: Request,
    response: Response,
    etching: str = Path(..., description="Rune ID, number, name or spaced name"),
    address: str = Path(..., min_length=1, description="Bitcoin address"),
    page: PaginationParams = Depends(pagination),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> PaginatedResponse:
        flt = resolve_rune(etching)
        result = store.get_rune_address_activity(flt, address, page.offset, page.limit)
        return _envelope(page, _require_rune(store, flt, result, etching), assemble_activity)

    return _serve(
        request,
        response,
        engine,
        "rune_address_activity",
        build,
        etching=etching,
        address=address,
        offset=page.offset,
        limit=page.limit,
    )


@router.get(
    "/etchings/{etching}/holders",
    response_model=PaginatedResponse[BalanceResponse],
    response_model_exclude_unset=True,
    responses=NOT_FOUND,
    summary="Rune holders",
    description="Retrieves a paginated list of holders for a Rune",
    tags=["Balances"],
)
def get_rune_holders(
    request: Request,
    response: Response,
    etching: str = Path(..., description="Rune ID, number, name or spaced name"),
    page: PaginationParams = Depends(pagination),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> PaginatedResponse:
        flt = resolve_rune(etching)
        result = store.get_rune_holders(flt, page.offset, page.limit)
        return _envelope(page, _require_rune(store, flt, result, etching), assemble_balance)

    return _serve(
        request,
        response,
        engine,
        "rune_holders",
        build,
        etching=etching,
        offset=page.offset,
        limit=page.limit,
    )


@router.get(
    "/etchings/{etching}/holders/{address}",
    response_model=BalanceResponse,
    response_model_exclude_unset=True,
    responses=NOT_FOUND,
    summary="Rune holder balance",
    description="Retrieves holder balance for a specific Rune",
    tags=["Balances"],
)
def get_rune_holder_balance(
    request: Request,
    response: Response,
    etching: str = Path(..., description="Rune ID, number, name or spaced name"),
    address: str = Path(..., min_length=1, description="Bitcoin address"),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> BalanceResponse:
        balance = store.get_rune_address_balance(resolve_rune(etching), address)
        if balance is None:
            raise NotFoundError(
                "Balance not found", context={"etching": etching, "address": address}
            )
        return assemble_balance(balance)

    return _serve(
        request, response, engine, "rune_holder_balance", build, etching=etching, address=address
    )


# ----- addresses -----


@router.get(
    "/addresses/{address}/balances",
    response_model=PaginatedResponse[BalanceResponse],
    response_model_exclude_unset=True,
    responses=ERRORS,
    summary="Address balances",
    description="Retrieves a paginated list of address balances",
    tags=["Balances"],
)
def get_address_balances(
    request: Request,
    response: Response,
    address: str = Path(..., min_length=1, description="Bitcoin address"),
    page: PaginationParams = Depends(pagination),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> PaginatedResponse:
        result = store.get_address_balances(address, page.offset, page.limit)
        return _envelope(page, result, assemble_balance)

    return _serve(
        request,
        response,
        engine,
        "address_balances",
        build,
        address=address,
        offset=page.offset,
        limit=page.limit,
    )


@router.get(
    "/addresses/{address}/activity",
    response_model=PaginatedResponse[ActivityResponse],
    response_model_exclude_unset=True,
    responses=ERRORS,
    summary="Address activity",
    description="Retrieves a paginated list of rune activity for an address",
    tags=["Activity"],
)
def get_address_activity(
    request: Request,
    response: Response,
    address: str = Path(..., min_length=1, description="Bitcoin address"),
    page: PaginationParams = Depends(pagination),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> PaginatedResponse:
        result = store.get_address_activity(address, page.offset, page.limit)
        return _envelope(page, result, assemble_activity)

    return _serve(
        request,
        response,
        engine,
        "address_activity",
        build,
        address=address,
        offset=page.offset,
        limit=page.limit,
    )


# ----- blocks & transactions -----


@router.get(
    "/blocks/{block}/activity",
    response_model=PaginatedResponse[ActivityResponse],
    response_model_exclude_unset=True,
    responses=ERRORS,
    summary="Block activity",
    description="Retrieves a paginated list of rune activity for a block",
    tags=["Activity"],
)
def get_block_activity(
    request: Request,
    response: Response,
    block: str = Path(..., pattern=BLOCK_PATTERN, description="Block height or hash"),
    page: PaginationParams = Depends(pagination),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> PaginatedResponse:
        result = store.get_block_activity(resolve_block(block), page.offset, page.limit)
        return _envelope(page, result, assemble_activity)

    return _serve(
        request,
        response,
        engine,
        "block_activity",
        build,
        block=block,
        offset=page.offset,
        limit=page.limit,
    )


@router.get(
    "/transactions/{tx_id}/activity",
    response_model=PaginatedResponse[ActivityResponse],
    response_model_exclude_unset=True,
    responses=ERRORS,
    summary="Transaction activity",
    description="Retrieves a paginated list of rune activity for a transaction",
    tags=["Activity"],
)
def get_transaction_activity(
    request: Request,
    response: Response,
    tx_id: str = Path(..., pattern=TX_ID_RE.pattern, description="Transaction ID"),
    page: PaginationParams = Depends(pagination),
    engine: Engine = Depends(get_engine),
):
    def build(store: RuneQueryStore, chain_tip: Optional[ChainTip]) -> PaginatedResponse:
        result = store.get_transaction_activity(normalize_tx_id(tx_id), page.offset, page.limit)
        return _envelope(page, result, assemble_activity)

    return _serve(
        request,
        response,
        engine,
        "transaction_activity",
        build,
        tx_id=tx_id,
        offset=page.offset,
        limit=page.limit,
    )


__all__ = ["get_engine", "pagination", "router"]
