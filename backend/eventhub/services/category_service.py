"""
Category and tag lookups.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.core.exceptions import Conflict, Forbidden, NotFound
from eventhub.core.logging import get_logger
from eventhub.core.permissions import Identity, Permission, can_act_on_owned
from eventhub.core.text import slugify
from eventhub.models.category import Category, Tag
from eventhub.models.event import Event, event_tags
from eventhub.schemas.category import CategoryCreate, TagCreate

logger = get_logger(__name__)


async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.name.asc()))
    return list(result.scalars().all())


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    name = data.name.strip()
    existing = await db.execute(select(Category.id).where(func.lower(Category.name) == name.lower()))
    if existing.scalar_one_or_none() is not None:
        raise Conflict(f"Category {name} already exists")

    category = Category(name=name, slug=slugify(name), description=data.description)
    db.add(category)
    await db.flush()
    await db.refresh(category)

    logger.info("category_created", category_id=category.id, name=category.name)
    return category


async def delete_category(db: AsyncSession, category_id: int) -> None:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFound(f"Category not found with id of {category_id}")

    in_use = await db.execute(
        select(func.count()).select_from(Event).where(Event.category_id == category_id)
    )
    if in_use.scalar():
        raise Conflict("Cannot delete a category that is assigned to events")

    await db.delete(category)
    await db.flush()
    logger.info("category_deleted", category_id=category_id)


async def list_tags(db: AsyncSession) -> list[Tag]:
    result = await db.execute(
        select(Tag).where(Tag.is_active.is_(True)).order_by(Tag.name.asc())
    )
    return list(result.scalars().all())


async def create_tag(db: AsyncSession, data: TagCreate, created_by_id: int) -> Tag:
    name = data.name.strip()
    existing = await db.execute(select(Tag.id).where(func.lower(Tag.name) == name.lower()))
    if existing.scalar_one_or_none() is not None:
        raise Conflict(f"Tag {name} already exists")

    tag = Tag(name=name, slug=slugify(name), color=data.color, created_by_id=created_by_id)
    db.add(tag)
    await db.flush()
    await db.refresh(tag)

    logger.info("tag_created", tag_id=tag.id, name=tag.name, created_by=created_by_id)
    return tag


async def delete_tag(db: AsyncSession, tag_id: int, identity: Identity) -> None:
    tag = await db.get(Tag, tag_id)
    if tag is None:
        raise NotFound(f"Tag not found with id of {tag_id}")
    if not can_act_on_owned(
        identity, tag.created_by_id, Permission.MANAGE_TAGS, Permission.MANAGE_OWN_TAGS
    ):
        raise Forbidden(f"User {identity.id} is not authorized to delete this tag")

    await db.execute(event_tags.delete().where(event_tags.c.tag_id == tag_id))
    await db.delete(tag)
    await db.flush()
    logger.info("tag_deleted", tag_id=tag_id, requester=identity.id)
