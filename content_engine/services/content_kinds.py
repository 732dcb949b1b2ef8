"""
Content kinds

Landing, partner and FAQ pages run through the same lifecycle algorithm.
A ContentDescriptor names everything that differs between them: tables,
owner columns, unique URL fields and the scalar body columns copied when a
row is cloned.
"""

from dataclasses import dataclass

from sqlalchemy import Table

from content_engine.exceptions import ValidationError
from content_engine.models import (
    FaqContent,
    FaqPage,
    LandingContent,
    LandingPage,
    PartnerContent,
    PartnerPage,
    faq_content_categories,
    landing_content_categories,
    partner_content_categories,
)
from content_engine.schemas.content import ContentBase, FaqContentIn, LandingContentIn, PartnerContentIn
from content_engine.utils.normalize import validate_model

# Scalar columns every kind carries; identity and slot state are set by the engine.
COMMON_BODY_FIELDS = (
    "workflow_status",
    "publish_status",
    "title",
    "html_input",
    "url_alias",
    "authored_at",
    "authored_on",
    "publish_on",
    "unpublish_on",
    "expired_at",
    "approval_email",
)

PARTNER_BODY_FIELDS = (
    "url",
    "thumbnail_image",
    "thumbnail_alt_text",
    "company_logo",
    "company_alt_text",
    "company_name",
    "company_detail",
    "lead_body",
    "challenges",
    "solutions",
    "results",
    "is_recommended",
)


@dataclass(frozen=True)
class ContentDescriptor:
    kind: str
    path_segment: str
    page_model: type
    content_model: type
    schema: type[ContentBase]
    category_table: Table
    owner_column: str
    unique_fields: tuple[str, ...]
    body_fields: tuple[str, ...]
    has_files: bool = False

    @property
    def category_owner_column(self):
        return self.category_table.c[self.owner_column]

    @property
    def category_id_column(self):
        return self.category_table.c.category_id

    def validate_body(self, body) -> ContentBase:
        """Accept a schema instance or a plain mapping."""
        if isinstance(body, self.schema):
            return body
        if isinstance(body, ContentBase):
            return validate_model(self.schema, body.model_dump(), f"{self.kind} content body")
        return validate_model(self.schema, body, f"{self.kind} content body")


LANDING = ContentDescriptor(
    kind="landing",
    path_segment="landing",
    page_model=LandingPage,
    content_model=LandingContent,
    schema=LandingContentIn,
    category_table=landing_content_categories,
    owner_column="landing_content_id",
    unique_fields=("url_alias",),
    body_fields=COMMON_BODY_FIELDS,
    has_files=True,
)

PARTNER = ContentDescriptor(
    kind="partner",
    path_segment="partner",
    page_model=PartnerPage,
    content_model=PartnerContent,
    schema=PartnerContentIn,
    category_table=partner_content_categories,
    owner_column="partner_content_id",
    unique_fields=("url", "url_alias"),
    body_fields=COMMON_BODY_FIELDS + PARTNER_BODY_FIELDS,
)

FAQ = ContentDescriptor(
    kind="faq",
    path_segment="faq",
    page_model=FaqPage,
    content_model=FaqContent,
    schema=FaqContentIn,
    category_table=faq_content_categories,
    owner_column="faq_content_id",
    unique_fields=("url", "url_alias"),
    body_fields=COMMON_BODY_FIELDS + ("url",),
)

CONTENT_KINDS: dict[str, ContentDescriptor] = {d.kind: d for d in (LANDING, PARTNER, FAQ)}


def get_content_kind(kind) -> ContentDescriptor:
    if isinstance(kind, ContentDescriptor):
        return kind
    descriptor = CONTENT_KINDS.get(str(kind).strip().lower())
    if descriptor is None:
        raise ValidationError(f"Unsupported content kind '{kind}'", field="kind")
    return descriptor
