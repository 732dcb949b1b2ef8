"""
Category Tagger

Resolves category references supplied with a content body and answers
"which categories of type X does this slot carry" queries. Categories are
shared between content rows; this service only ever creates them, never
deletes them.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from content_engine.exceptions import CategoryNotFoundError, ContentNotFoundError, ValidationError
from content_engine.models.category import Category, CategoryType
from content_engine.models.enums import ContentMode, Language
from content_engine.schemas.content import CategoryRef
from content_engine.services.content_kinds import ContentDescriptor
from content_engine.utils.normalize import normalize_language, normalize_mode, parse_uuid, validate_model

logger = logging.getLogger(__name__)


class CategoryService:
    """Service for resolving and querying content categories."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_categories(self, refs: list[CategoryRef], language: Language) -> list[Category]:
        """
        Turn category references into Category rows, creating missing ones.

        Args:
            refs: References by id, or by (type_code, name[, language])
            language: Language used when a reference does not name one

        Returns:
            Categories in reference order, without duplicates

        Raises:
            CategoryNotFoundError: If a referenced id does not exist
        """
        categories: list[Category] = []
        seen: set[uuid.UUID] = set()

        for ref in refs:
            if not isinstance(ref, CategoryRef):
                ref = validate_model(CategoryRef, ref, "category reference")

            if ref.id is not None:
                category = await self.db.get(Category, ref.id)
                if category is None:
                    raise CategoryNotFoundError(ref.id)
            else:
                category = await self._get_or_create(ref.type_code, ref.name, ref.language or language)

            if category.id not in seen:
                seen.add(category.id)
                categories.append(category)

        return categories

    async def get_or_create_type(self, type_code: str) -> CategoryType:
        result = await self.db.execute(select(CategoryType).where(CategoryType.type_code == type_code))
        category_type = result.scalars().first()
        if category_type is None:
            category_type = CategoryType(id=uuid.uuid4(), type_code=type_code, name=type_code)
            self.db.add(category_type)
            await self.db.flush()
            logger.info(f"Created category type '{type_code}'")
        return category_type

    async def _get_or_create(self, type_code: str, name: str, language: Language) -> Category:
        category_type = await self.get_or_create_type(type_code)

        result = await self.db.execute(
            select(Category).where(
                Category.category_type_id == category_type.id,
                Category.language_code == language.value,
                Category.name == name,
            )
        )
        category = result.scalars().first()
        if category is None:
            category = Category(
                id=uuid.uuid4(),
                category_type_id=category_type.id,
                category_type=category_type,
                language_code=language.value,
                name=name,
            )
            self.db.add(category)
            await self.db.flush()
            logger.info(f"Created category '{name}' ({type_code}, {language.value})")
        return category

    async def find_categories(
        self,
        descriptor: ContentDescriptor,
        page_id,
        category_type_code: str,
        language,
        mode,
    ) -> list[Category]:
        """Categories of one type linked to the content row in a given slot."""
        page_id = parse_uuid(page_id, "page_id")
        language = normalize_language(language)
        mode = normalize_mode(mode)
        if mode == ContentMode.HISTORIES:
            raise ValidationError("Histories holds many rows and is not a slot", field="mode")
        model = descriptor.content_model

        result = await self.db.execute(
            select(model.id).where(model.page_id == page_id, model.language == language, model.mode == mode)
        )
        content_id = result.scalars().first()
        if content_id is None:
            raise ContentNotFoundError(
                message=f"No {mode.value} content for page '{page_id}' in language '{language.value}'"
            )

        result = await self.db.execute(
            select(descriptor.category_id_column).where(descriptor.category_owner_column == content_id)
        )
        category_ids = list(result.scalars().all())
        if not category_ids:
            return []

        result = await self.db.execute(
            select(Category)
            .join(CategoryType, CategoryType.id == Category.category_type_id)
            .where(Category.id.in_(category_ids), CategoryType.type_code == category_type_code)
            .order_by(Category.weight, Category.name)
        )
        return list(result.scalars().all())
