"""Federated search across memory notes, projects, tasks, and activities.

The engine fans out to one source per selected domain, records how many
results each domain produced, merges everything into a single list ordered
by score (stable, so equal scores keep domain order), and truncates it.

Failure handling differs by domain class:

- Memory (filesystem) failures are logged and the domain contributes nothing.
- Store failures raise :class:`SearchFailedError`. With
  ``tolerate_store_failures`` enabled they are only fatal when the failing
  domain is the sole requested one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from app.constants import SEARCH_DOMAIN_ORDER, SearchDomain
from app.search.results import SearchCounts, SearchPage, SearchResult

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 200

ALL_DOMAINS: frozenset[SearchDomain] = frozenset(SEARCH_DOMAIN_ORDER)


class SearchFailedError(Exception):
    """Raised when a store-backed domain cannot be searched.

    Attributes:
        domain: The domain whose source failed.
    """

    def __init__(self, domain: SearchDomain) -> None:
        self.domain = domain
        super().__init__(f"Search failed in domain '{domain.value}'")


class SearchSource(Protocol):
    domain: SearchDomain

    async def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[SearchResult]: ...


def parse_domains(raw: str | None) -> frozenset[SearchDomain]:
    """Parse a comma-separated domain list such as ``"memory,tasks"``.

    ``None`` or a blank string selects every domain. Unknown names are
    ignored, so a list of only unknown names selects nothing.
    """
    if raw is None or not raw.strip():
        return ALL_DOMAINS

    selected: set[SearchDomain] = set()
    for item in raw.split(","):
        name = item.strip().lower()
        if not name:
            continue
        try:
            selected.add(SearchDomain(name))
        except ValueError:
            logger.debug("Ignoring unknown search domain: %r", name)
    return frozenset(selected)


class FederatedSearchEngine:
    """Merge ranked results from independent per-domain sources.

    Args:
        sources: One source per domain. Domains without a source are skipped.
        tolerate_store_failures: Keep going when a store domain fails, as long
            as other domains were requested too.
    """

    def __init__(
        self,
        sources: Iterable[SearchSource],
        tolerate_store_failures: bool = False,
    ) -> None:
        self._sources: dict[SearchDomain, SearchSource] = {source.domain: source for source in sources}
        self._tolerate_store_failures = tolerate_store_failures

    async def search(
        self,
        query: str,
        domains: Iterable[SearchDomain] | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> SearchPage:
        """Run the selected domains and return the merged, truncated page.

        Raises:
            SearchFailedError: If a store-backed domain fails.
        """
        limit = min(max(1, limit), MAX_LIMIT)
        query = query.strip()
        counts = SearchCounts()

        if not query:
            return SearchPage(query=query, results=[], counts=counts)

        selected = ALL_DOMAINS if domains is None else frozenset(domains)
        results: list[SearchResult] = []

        for domain in SEARCH_DOMAIN_ORDER:
            if domain not in selected or domain not in self._sources:
                continue
            domain_results = await self._search_domain(domain, query, limit, sole_domain=len(selected) == 1)
            setattr(counts, domain.value, len(domain_results))
            results.extend(domain_results)

        # list.sort is stable: equal scores keep domain order
        results.sort(key=lambda result: result.score, reverse=True)
        return SearchPage(query=query, results=results[:limit], counts=counts)

    async def _search_domain(
        self,
        domain: SearchDomain,
        query: str,
        limit: int,
        sole_domain: bool,
    ) -> list[SearchResult]:
        source = self._sources[domain]
        try:
            return await source.search(query, limit=limit)
        except Exception as exc:
            if domain is SearchDomain.MEMORY:
                logger.exception("Memory search failed; continuing without memory results")
                return []
            if self._tolerate_store_failures and not sole_domain:
                logger.exception("Search domain %s unavailable; continuing without it", domain.value)
                return []
            logger.exception("Search domain %s failed", domain.value)
            raise SearchFailedError(domain) from exc
