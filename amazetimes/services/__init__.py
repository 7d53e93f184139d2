"""Content services: repository, bilingual resolution, admin editing and auth."""

from amazetimes.services.auth_api import auth_client
from amazetimes.services.content_repository import content_repository
from amazetimes.services.query_cache import QueryCache, QueryKey, QueryName, MutationName
from amazetimes.services.submission_guard import submission_guard

__all__ = [
    "auth_client",
    "content_repository",
    "QueryCache",
    "QueryKey",
    "QueryName",
    "MutationName",
    "submission_guard",
]
