"""Generic partial-update builder.

PATCH bodies are pydantic models whose fields are all optional. Only the
fields the caller actually sent are written; a field explicitly sent as
``null`` clears the column, unless the column is NOT NULL.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from crm.exceptions import ValidationError
from crm.timeutils import to_naive_utc, utcnow


def patch_values(
    patch: BaseModel,
    renames: Optional[Mapping[str, str]] = None,
    exclude: tuple[str, ...] = (),
    model=None,
) -> dict[str, Any]:
    """
    Extract the explicitly provided fields of a patch model.

    Args:
        patch: Pydantic model instance parsed from the request body
        renames: Map of schema field name -> column name
        exclude: Field names handled by the caller (e.g. passwords to encrypt)
        model: Target table; an explicit null for one of its NOT NULL columns is rejected

    Returns:
        Dict of column name -> value, ready for an UPDATE

    Raises:
        ValidationError: a NOT NULL column was sent as null
    """
    renames = renames or {}
    values: dict[str, Any] = {}
    for field, value in patch.model_dump(exclude_unset=True).items():
        if field in exclude:
            continue
        column = renames.get(field, field)
        if value is None and model is not None:
            _reject_null(patch, field, model, column)
        if isinstance(value, datetime):
            value = to_naive_utc(value)
        values[column] = value
    return values


def _reject_null(patch: BaseModel, field: str, model, column: str) -> None:
    table_column = model.__table__.c.get(column)
    if table_column is not None and not table_column.nullable:
        name = type(patch).model_fields[field].alias or field
        raise ValidationError.for_field(name, f"{name} cannot be null")


async def apply_patch(
    db: AsyncSession,
    model,
    pk: Any,
    values: Mapping[str, Any],
    where: tuple = (),
    touch: bool = True,
) -> int:
    """
    Run a single ``UPDATE model SET ... WHERE id = pk``.

    Returns the number of rows matched (0 means the row does not exist
    or was filtered out by ``where``). An empty ``values`` is a no-op.
    """
    values = dict(values)
    if not values:
        return 0
    if touch and "updated_at" in model.__table__.c and "updated_at" not in values:
        values["updated_at"] = utcnow()

    stmt = update(model).where(model.id == pk, *where).values(**values)
    result = await db.execute(stmt)
    return result.rowcount
