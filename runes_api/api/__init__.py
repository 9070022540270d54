"""HTTP layer: routes, response schemas and the chain-tip cache gate."""

from .http import router
from .schemas import (
    ActivityResponse,
    ApiStatusResponse,
    BalanceResponse,
    EtchingResponse,
    PaginatedResponse,
    PaginationParams,
)

__all__ = [
    "ActivityResponse",
    "ApiStatusResponse",
    "BalanceResponse",
    "EtchingResponse",
    "PaginatedResponse",
    "PaginationParams",
    "router",
]
