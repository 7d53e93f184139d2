"""
Pydantic schemas for admin request bodies.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ArticlePayload(BaseModel):
    """Article fields sent by the admin console.

    Only types are checked here; required fields, lengths and allowed
    categories are reported by ``validate_article_form`` one error at a time.
    Unset fields stay unset so an update only touches what was sent.
    """

    model_config = ConfigDict(extra="ignore")

    title_en: str = ""
    title_ta: str = ""
    content_en: str = ""
    content_ta: str = ""
    category: str = "general"
    party_id: Optional[str] = None
    featured_image: Optional[str] = None
    is_breaking: bool = False
    is_featured: bool = False
    status: str = "published"
    submission_token: Optional[str] = None

    def form_fields(self) -> dict:
        """Fields the client actually sent, minus the submission token."""
        return self.model_dump(exclude_unset=True, exclude={"submission_token"})
