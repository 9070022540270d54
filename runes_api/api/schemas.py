"""Pydantic schemas for request parameters and API responses."""

from __future__ import annotations

from typing import Generic, List, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DEFAULT_LIMIT = 20
MAX_LIMIT = 60


class PaginationParams(BaseModel):
    """Window requested through ``offset`` and ``limit`` query parameters."""

    model_config = ConfigDict(extra="ignore")

    offset: int = Field(0, ge=0, title="Offset", description="Result offset")
    limit: int = Field(
        DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, title="Limit", description="Results per page"
    )


class RuneDetail(BaseModel):
    """Identity of the rune an activity or balance row refers to."""

    id: str = Field(..., examples=["840000:1"])
    number: int = Field(..., examples=[1])
    name: str = Field(..., examples=["ZZZZZFEHUZZZZZ"])
    spaced_name: str = Field(..., examples=["Z•Z•Z•Z•Z•FEHU•Z•Z•Z•Z•Z"])


class MintTermsResponse(BaseModel):
    amount: str | None = Field(None, examples=["100"])
    cap: str | None = Field(None, examples=["1111111"])
    height_start: int | None = Field(None, examples=[840000])
    height_end: int | None = Field(None, examples=[1050000])
    offset_start: int | None = Field(None, examples=[0])
    offset_end: int | None = Field(None, examples=[200])


class SupplyResponse(BaseModel):
    current: str = Field(..., examples=["11274916350"])
    minted: str = Field(..., examples=["274916100"])
    total_mints: str = Field(..., examples=["250"])
    mint_percentage: str = Field(..., examples=["59.4567"])
    mintable: bool
    burned: str = Field(..., examples=["5100"])
    total_burns: str = Field(..., examples=["17"])
    premine: str = Field(..., examples=["11000000000"])


class LocationResponse(BaseModel):
    """Where on-chain a record was observed.

    ``vout`` and ``output`` are only present for rows tied to an output.
    """

    block_hash: str = Field(
        ..., examples=["00000000000000000000c9787573a1f1775a2b56b403a2d0c7957e9a5bc754bb"]
    )
    block_height: int = Field(..., examples=[840000])
    tx_id: str = Field(
        ..., examples=["2bb85f4b004be6da54f766c17c1e855187327112c231ef2ff35ebad0ea67c69e"]
    )
    tx_index: int = Field(..., examples=[1])
    vout: int | None = Field(None, examples=[100])
    output: str | None = Field(
        None,
        examples=["2bb85f4b004be6da54f766c17c1e855187327112c231ef2ff35ebad0ea67c69e:100"],
    )
    timestamp: int = Field(..., examples=[1713571767])


class EtchingResponse(BaseModel):
    id: str = Field(..., examples=["840000:1"])
    name: str = Field(..., examples=["ZZZZZFEHUZZZZZ"])
    spaced_name: str = Field(..., examples=["Z•Z•Z•Z•Z•FEHU•Z•Z•Z•Z•Z"])
    number: int = Field(..., examples=[1])
    divisibility: int = Field(..., examples=[2])
    symbol: str = Field(..., examples=["ᚠ"])
    turbo: bool = Field(..., examples=[False])
    mint_terms: MintTermsResponse
    supply: SupplyResponse
    location: LocationResponse


class ActivityResponse(BaseModel):
    rune: RuneDetail
    address: str | None = Field(None, examples=["bc1q7jd477wc5s88hsvenr0ddtatsw282hfjzg59wz"])
    receiver_address: str | None = Field(
        None, examples=["bc1pgdrveee2v4ez95szaakw5gkd8eennv2dddf9rjdrlt6ch56lzrrsxgvazt"]
    )
    amount: str | None = Field(None, examples=["11000000000"])
    operation: Literal["etching", "mint", "burn", "send", "receive"]
    location: LocationResponse


class BalanceResponse(BaseModel):
    rune: RuneDetail
    address: str | None = Field(None, examples=["bc1q7jd477wc5s88hsvenr0ddtatsw282hfjzg59wz"])
    balance: str = Field(..., examples=["11000000000"])


class PaginatedResponse(BaseModel, Generic[T]):
    """Envelope shared by every listing endpoint."""

    limit: int = Field(..., examples=[20])
    offset: int = Field(..., examples=[0])
    total: int = Field(..., examples=[1])
    results: List[T]


class ApiStatusResponse(BaseModel):
    server_version: str = Field(..., examples=["runes-api v0.1.0"])
    status: str = Field(..., examples=["ready"])
    block_height: int | None = Field(None, examples=[840000])


class NotFoundResponse(BaseModel):
    error: Literal["Not found"] = "Not found"


class ErrorResponse(BaseModel):
    error: str
    detail: List[dict] | None = None


__all__ = [
    "ActivityResponse",
    "ApiStatusResponse",
    "BalanceResponse",
    "DEFAULT_LIMIT",
    "ErrorResponse",
    "EtchingResponse",
    "LocationResponse",
    "MAX_LIMIT",
    "MintTermsResponse",
    "NotFoundResponse",
    "PaginatedResponse",
    "PaginationParams",
    "RuneDetail",
    "SupplyResponse",
]
