"""Admin article editor: form buffer, validation and submit state machine.

States::

    EMPTY -> POPULATED -> VALIDATING -> SUBMITTING -> SUCCEEDED
                              |              |
                              +--> FAILED <--+

A failed submission keeps the buffer untouched so the user can correct and
retry; a successful one resets the buffer and clears the edit target.
"""

import logging
import uuid
from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Mapping, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from amazetimes.models import ArticleCategory, ArticleStatus
from amazetimes.services.content_repository import (
    ArticleNotFoundError,
    ContentRepository,
    RepositoryError,
    content_repository,
)
from amazetimes.services.query_cache import INVALIDATES, MutationName, QueryCache, QueryName
from amazetimes.services.submission_guard import SubmissionGuard, submission_guard

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 500


@dataclass
class ArticleForm:
    """Editable columns of a news article, one attribute per column."""

    title_en: str = ""
    title_ta: str = ""
    content_en: str = ""
    content_ta: str = ""
    category: str = ArticleCategory.GENERAL.value
    party_id: Optional[str] = None
    featured_image: Optional[str] = None
    is_breaking: bool = False
    is_featured: bool = False
    status: str = ArticleStatus.PUBLISHED.value

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ArticleForm":
        """Build a form from submitted data, ignoring unknown keys."""
        form = cls()
        return form.merged(data)

    @classmethod
    def from_record(cls, record: Any) -> "ArticleForm":
        """Copy an existing article's editable fields verbatim."""
        if not isinstance(record, Mapping):
            record = {f.name: getattr(record, f.name, None) for f in fields(cls)}
        return cls.from_mapping(record)

    def merged(self, data: Mapping[str, Any]) -> "ArticleForm":
        """Return a copy with the known keys of ``data`` applied."""
        names = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in data.items() if k in names})

    def as_fields(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class FormValid:
    form: ArticleForm


@dataclass(frozen=True)
class FormInvalid:
    message: str
    field: str


ValidationResult = Union[FormValid, FormInvalid]


def validate_article_form(form: ArticleForm) -> ValidationResult:
    """Validate a form, reporting only the first problem found."""
    checks = (
        ("title_en", not form.title_en, "English title is required"),
        ("title_en", len(form.title_en) > MAX_TITLE_LENGTH,
         f"English title must be at most {MAX_TITLE_LENGTH} characters"),
        ("title_ta", not form.title_ta, "Tamil title is required"),
        ("title_ta", len(form.title_ta) > MAX_TITLE_LENGTH,
         f"Tamil title must be at most {MAX_TITLE_LENGTH} characters"),
        ("content_en", not form.content_en, "English content is required"),
        ("content_ta", not form.content_ta, "Tamil content is required"),
        ("category", not form.category, "Category is required"),
        ("category", form.category not in _CATEGORY_VALUES,
         "Category must be one of: " + ", ".join(_CATEGORY_VALUES)),
        ("status", form.status not in _STATUS_VALUES, "Status must be published or draft"),
    )
    for name, failed, message in checks:
        if failed:
            return FormInvalid(message=message, field=name)
    return FormValid(form=form)


_CATEGORY_VALUES = tuple(c.value for c in ArticleCategory)
_STATUS_VALUES = tuple(s.value for s in ArticleStatus)


class EditorState(str, Enum):
    EMPTY = "empty"
    POPULATED = "populated"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    STORAGE = "storage"


@dataclass
class SubmitResult:
    """Outcome of a submit or delete action."""

    ok: bool
    article: Optional[dict] = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None
    invalidated: set[QueryName] = field(default_factory=set)


class ArticleEditor:
    """Stateful editor for one article form.

    ``editing_id`` is the edit target; when it is None a submit creates a
    new article.
    """

    def __init__(
        self,
        repository: ContentRepository = content_repository,
        query_cache: Optional[QueryCache] = None,
        guard: SubmissionGuard = submission_guard,
    ):
        self.repository = repository
        self.query_cache = query_cache
        self.guard = guard
        self.form = ArticleForm()
        self.editing_id: Optional[str] = None
        self.state = EditorState.EMPTY
        self.error: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @property
    def is_busy(self) -> bool:
        """Whether the submit control should be disabled."""
        return self.state == EditorState.SUBMITTING

    def start_create(self) -> None:
        self.form = ArticleForm()
        self.editing_id = None
        self.error = None
        self.state = EditorState.POPULATED

    def load(self, record: Any) -> None:
        """Load an existing article into the buffer for editing."""
        article_id = record["id"] if isinstance(record, Mapping) else record.id
        self.form = ArticleForm.from_record(record)
        self.editing_id = article_id
        self.error = None
        self.state = EditorState.POPULATED

    def update(self, **changes: Any) -> None:
        """Change buffer fields (the user typing into the form)."""
        self.form = self.form.merged(changes)
        if self.state != EditorState.SUBMITTING:
            self.state = EditorState.POPULATED

    def reset(self) -> None:
        self.form = ArticleForm()
        self.editing_id = None
        self.error = None
        self.state = EditorState.EMPTY

    async def submit(self, db: AsyncSession, token: Optional[str] = None) -> SubmitResult:
        """Validate the buffer and create or update the article."""
        if self.is_busy:
            return SubmitResult(
                ok=False, error="A submission is already in progress", kind=ErrorKind.CONFLICT
            )

        self.state = EditorState.VALIDATING
        outcome = validate_article_form(self.form)
        if isinstance(outcome, FormInvalid):
            return self._fail(outcome.message, ErrorKind.VALIDATION)

        token = token or uuid.uuid4().hex
        if not self.guard.begin(token):
            return self._fail("This submission has already been received", ErrorKind.CONFLICT)

        self.state = EditorState.SUBMITTING
        values = self.form.as_fields()
        try:
            if self.is_editing:
                mutation = MutationName.UPDATE_ARTICLE
                article = await self.repository.update_article(db, self.editing_id, values)
            else:
                mutation = MutationName.CREATE_ARTICLE
                article = await self.repository.create_article(db, values)
        except ArticleNotFoundError as exc:
            self.guard.release(token)
            return self._fail(exc.message, ErrorKind.NOT_FOUND)
        except RepositoryError as exc:
            self.guard.release(token)
            return self._fail(exc.message, ErrorKind.STORAGE)

        self.guard.complete(token)
        invalidated = self._invalidate(mutation)
        self.form = ArticleForm()
        self.editing_id = None
        self.error = None
        self.state = EditorState.SUCCEEDED
        return SubmitResult(ok=True, article=article, invalidated=invalidated)

    async def delete(self, db: AsyncSession, article_id: str) -> SubmitResult:
        """Hard-delete an article; the form buffer is not involved."""
        try:
            removed = await self.repository.delete_article(db, article_id)
        except RepositoryError as exc:
            return SubmitResult(ok=False, error=exc.message, kind=ErrorKind.STORAGE)

        if not removed:
            logger.info("Delete of unknown article %s", article_id)
        if self.editing_id == article_id:
            self.reset()
        return SubmitResult(ok=True, invalidated=self._invalidate(MutationName.DELETE_ARTICLE))

    def _fail(self, message: str, kind: ErrorKind) -> SubmitResult:
        self.error = message
        self.state = EditorState.FAILED
        logger.info("Article submission rejected (%s): %s", kind.value, message)
        return SubmitResult(ok=False, error=message, kind=kind)

    def _invalidate(self, mutation: MutationName) -> set[QueryName]:
        if self.query_cache is not None:
            return self.query_cache.invalidate(mutation)
        return set(INVALIDATES[mutation])
