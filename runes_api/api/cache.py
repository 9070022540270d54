"""Conditional GET support keyed to the indexer's chain tip.

Every cacheable response carries the hash of the newest indexed block as its
``ETag``. Clients echoing that tag in ``If-None-Match`` get ``304`` until the
indexer ingests another block.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from fastapi import Request, Response

from runes_api.runes.models import ChainTip
from runes_api.runes.store import RuneQueryStore

LOGGER = logging.getLogger(__name__)

CACHE_CONTROL_MUST_REVALIDATE = "must-revalidate"


def parse_if_none_match(header: str | None) -> List[str]:
    """Split an ``If-None-Match`` header into bare entity tags."""

    if not header:
        return []
    tags: List[str] = []
    for raw in header.split(","):
        tag = raw.strip()
        if tag.startswith("W/"):
            tag = tag[2:]
        tag = tag.strip('"')
        if tag:
            tags.append(tag)
    return tags


def etag_for(chain_tip: ChainTip) -> str:
    return f'"{chain_tip.block_hash}"'


@dataclass(frozen=True)
class Freshness:
    """Outcome of the cache gate for one request."""

    chain_tip: Optional[ChainTip]
    etag: Optional[str] = None
    not_modified: bool = False

    def not_modified_response(self) -> Response:
        headers = {"Cache-Control": CACHE_CONTROL_MUST_REVALIDATE}
        if self.etag:
            headers["ETag"] = self.etag
        return Response(status_code=304, headers=headers)


def check_freshness(request: Request, response: Response, store: RuneQueryStore) -> Freshness:
    """Compare the client's validator with the current chain tip.

    With an empty ledger there is nothing to validate against and the request
    proceeds uncached. Otherwise ``response`` gets the validator headers.
    """

    chain_tip = store.get_chain_tip()
    if chain_tip is None:
        return Freshness(chain_tip=None)

    etag = etag_for(chain_tip)
    requested = parse_if_none_match(request.headers.get("if-none-match"))
    if chain_tip.block_hash in requested or "*" in requested:
        LOGGER.debug("Chain tip unchanged, short-circuiting", extra={"etag": etag})
        return Freshness(chain_tip=chain_tip, etag=etag, not_modified=True)

    response.headers["Cache-Control"] = CACHE_CONTROL_MUST_REVALIDATE
    response.headers["ETag"] = etag
    return Freshness(chain_tip=chain_tip, etag=etag)


__all__ = [
    "CACHE_CONTROL_MUST_REVALIDATE",
    "Freshness",
    "check_freshness",
    "etag_for",
    "parse_if_none_match",
]
