"""Query identities, mutation invalidation table and request-scoped dedup.

Every repository read is identified by a ``QueryKey`` of (query name,
arguments). Mutations never patch cached results; they drop every query
listed for them in ``INVALIDATES`` so the next read goes to the datastore.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class QueryName(str, Enum):
    """Read queries that can be cached and invalidated."""

    NEWS_LATEST = "news-latest"
    BREAKING_NEWS = "breaking-news"
    ARTICLE = "article"
    RELATED_NEWS = "related-news"
    PARTY = "party"
    PARTY_NEWS = "party-news"
    PARTIES = "parties"
    ADMIN_NEWS = "admin-news"
    ADMIN_PARTIES = "admin-parties"


class MutationName(str, Enum):
    """Write operations issued by the admin console."""

    CREATE_ARTICLE = "create-article"
    UPDATE_ARTICLE = "update-article"
    DELETE_ARTICLE = "delete-article"


_ARTICLE_READS = frozenset({
    QueryName.ADMIN_NEWS,
    QueryName.NEWS_LATEST,
    QueryName.BREAKING_NEWS,
    QueryName.ARTICLE,
    QueryName.RELATED_NEWS,
    QueryName.PARTY_NEWS,
})

# Mutation -> read queries whose results it makes stale
INVALIDATES: dict[MutationName, frozenset[QueryName]] = {
    MutationName.CREATE_ARTICLE: _ARTICLE_READS,
    MutationName.UPDATE_ARTICLE: _ARTICLE_READS,
    MutationName.DELETE_ARTICLE: _ARTICLE_READS,
}


@dataclass(frozen=True)
class QueryKey:
    """Identity of a read: query name plus its arguments."""

    name: QueryName
    args: tuple = field(default_factory=tuple)

    @classmethod
    def of(cls, name: QueryName, *args: Any) -> "QueryKey":
        return cls(name=name, args=tuple(args))

    def __str__(self) -> str:
        return "/".join([self.name.value, *(str(a) for a in self.args)])


class QueryCache:
    """Deduplicates identical reads for the lifetime of one request.

    Concurrent callers with the same key share one in-flight load. Failed
    loads are not kept, so the next caller retries against the datastore.
    """

    def __init__(self):
        self._entries: dict[QueryKey, asyncio.Future] = {}

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        """Return the result for ``key``, running ``loader`` at most once."""
        existing = self._entries.get(key)
        if existing is not None:
            return await asyncio.shield(existing)

        future = asyncio.get_running_loop().create_future()
        self._entries[key] = future
        try:
            result = await loader()
        except asyncio.CancelledError:
            self._discard(key, future)
            future.cancel()
            raise
        except Exception as exc:
            self._discard(key, future)
            future.set_exception(exc)
            # Mark retrieved so an unobserved failure is not reported twice
            future.exception()
            raise
        future.set_result(result)
        return result

    def _discard(self, key: QueryKey, future: asyncio.Future) -> None:
        if self._entries.get(key) is future:
            del self._entries[key]

    def invalidate(self, mutation: MutationName) -> set[QueryName]:
        """Drop every cached read that ``mutation`` makes stale.

        Returns:
            The query names invalidated for this mutation.
        """
        names = INVALIDATES.get(mutation, frozenset())
        stale = [key for key in self._entries if key.name in names]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("%s invalidated %s", mutation.value, ", ".join(map(str, stale)))
        return set(names)
