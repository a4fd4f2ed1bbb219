# =============================================================================
# core/services/admin_listing_service.py - Admin Listing
# =============================================================================
# Backs the admin panel table:
# - fetch(): upstream listing through the proxy, falling back to the local
#   store when the upstream answers with an error envelope
# - filter_records() / paginate(): text search and page slicing
# - delete(): upstream delete, then drop the cached copy
# =============================================================================

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from core.models.envelope import ProxyResult
from core.services.fallback_store import LocalFallbackStore
from core.services.proxy_service import ProxyService

logger = logging.getLogger(__name__)


class ListingSource(str, Enum):
    """Where the records shown to the admin came from."""
    UPSTREAM = "upstream"
    FALLBACK = "fallback"


@dataclass
class ListingPage:
    """One page of the admin table."""
    records: list[dict[str, Any]]
    total: int
    page: int
    page_size: int
    source: ListingSource
    error: dict[str, Any] | None = None
    filters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "data": self.records,
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "source": self.source.value,
        }
        if self.filters:
            result["filters"] = self.filters
        if self.error:
            result["error"] = self.error
        return result


def extract_records(body: Any) -> list[dict[str, Any]] | None:
    """
    Pull the record list out of an upstream listing body.

    Accepts {"data": [...]} or a bare list. Returns None for any other shape.
    """
    if isinstance(body, list):
        return [r for r in body if isinstance(r, dict)]
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        return [r for r in body["data"] if isinstance(r, dict)]
    return None


def filter_records(records: list[dict[str, Any]], query: str | None) -> list[dict[str, Any]]:
    """
    Keep records whose name, email or id contain the query (case-insensitive)
    or whose document number contains it verbatim.
    """
    if not query:
        return list(records)

    needle = query.lower()

    def matches(record: dict[str, Any]) -> bool:
        return (
            needle in str(record.get("nombreCompleto") or "").lower()
            or query in str(record.get("numeroDocumento") or "")
            or needle in str(record.get("email") or "").lower()
            or needle in str(record.get("id") or "").lower()
        )

    return [r for r in records if matches(r)]


def paginate(
    records: list[dict[str, Any]],
    page: int,
    page_size: int,
) -> list[dict[str, Any]]:
    """Return the 1-based page of records. Out-of-range pages are empty."""
    start = (max(page, 1) - 1) * page_size
    return records[start:start + page_size]


class AdminListingService:
    """
    Listing, search and delete for the admin panel.

    Example:
        service = AdminListingService(proxy, store)
        page = await service.page(authorization, query="perez", page=1, page_size=10)
    """

    def __init__(self, proxy: ProxyService, store: LocalFallbackStore) -> None:
        self.proxy = proxy
        self.store = store

    async def fetch(
        self,
        authorization: str | None = None,
    ) -> tuple[list[dict[str, Any]], ListingSource, dict[str, Any] | None]:
        """
        Get all records, preferring the upstream. Locally saved records the
        upstream does not list yet are appended.

        Returns:
            (records, source, upstream error envelope member or None)
        """
        result = await self.proxy.list_applications(authorization)

        records = extract_records(result.body) if result.is_success else None
        if records is not None:
            # Records saved offline stay listed until the upstream knows them
            merged = self.store.merge_upstream(records)
            return merged, ListingSource.UPSTREAM, None

        error = _error_member(result)
        logger.warning(
            f"Upstream listing unavailable ({result.status_code}), "
            f"serving {self.store.path} instead"
        )
        return self.store.all(), ListingSource.FALLBACK, error

    async def page(
        self,
        authorization: str | None = None,
        query: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> ListingPage:
        records, source, error = await self.fetch(authorization)
        matching = filter_records(records, query)
        return ListingPage(
            records=paginate(matching, page, page_size),
            total=len(matching),
            page=page,
            page_size=page_size,
            source=source,
            error=error,
            filters={"q": query} if query else {},
        )

    async def delete(self, record_id: str, authorization: str | None = None) -> ProxyResult:
        """
        Delete upstream; the cached copy is removed only when that succeeds.
        """
        result = await self.proxy.delete(record_id, authorization)
        if result.is_success:
            self.store.delete(record_id)
        return result


def _error_member(result: ProxyResult) -> dict[str, Any]:
    body = result.body
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return {
        "name": "UnexpectedListing",
        "message": "La respuesta del listado no tiene el formato esperado",
        "statusCode": result.status_code,
    }
