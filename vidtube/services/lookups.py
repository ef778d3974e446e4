"""
Identifier parsing and entity lookups shared by the services

Every operation validates ids first (400), then existence (404), then
ownership (403).
"""

from typing import Type, TypeVar, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import InvalidArgumentError, NotFoundError, PermissionDeniedError

M = TypeVar("M")


def parse_id(value: Union[str, UUID, None], field: str = "id") -> UUID:
    """Parse a client supplied identifier, raising InvalidArgumentError"""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except (TypeError, ValueError, AttributeError):
        raise InvalidArgumentError(f"Invalid {field}", field=field)


async def get_or_404(db: AsyncSession, model: Type[M], entity_id: UUID, resource: str) -> M:
    entity = await db.get(model, entity_id)
    if entity is None:
        raise NotFoundError(resource, entity_id)
    return entity


async def get_for_update_or_404(db: AsyncSession, model: Type[M], entity_id: UUID, resource: str) -> M:
    """
    Fresh copy of the row, locked until the transaction ends where the
    backend supports SELECT ... FOR UPDATE
    """
    result = await db.execute(
        select(model)
        .where(model.id == entity_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    entity = result.scalar_one_or_none()
    if entity is None:
        raise NotFoundError(resource, entity_id)
    return entity


def ensure_owner(entity, actor_id: UUID, operation: str, resource: str):
    if entity.owner_id != actor_id:
        raise PermissionDeniedError(operation, resource)


def ensure_length(value: str, limit: int, field: str):
    if len(value) > limit:
        raise InvalidArgumentError(f"{field} must be at most {limit} characters", field=field)
