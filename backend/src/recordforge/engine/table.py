"""Table model construction.

Turns repository records into a render-ready table: columns in the
schema's display order with friendly labels, display-only values resolved
by lookup, dates in the fixed display pattern, rows in default sort order.
"""

import logging
from datetime import date, datetime
from typing import Any

from recordforge.core.types import get_field_type
from recordforge.engine.messages import lookup_failed
from recordforge.engine.types import EntityView, TableColumn, TableModel
from recordforge.metadata.loader import DisplayFieldConfig, EntitySchema, SortConfig
from recordforge.persistence.adapter import EntityRepository
from recordforge.persistence.errors import DataAccessError
from recordforge.validation.field_rules import format_date, is_empty, parse_date

logger = logging.getLogger(__name__)


def build_columns(schema: EntitySchema) -> list[TableColumn]:
    columns = []
    for name in schema.columns():
        descriptor = schema.get_field(name)
        alignment = get_field_type(descriptor.type).ui.alignment if descriptor else "left"
        columns.append(TableColumn(
            name=name,
            label=schema.label_for(name),
            display_only=schema.is_display_only(name),
            alignment=alignment,
        ))
    return columns


def resolve_display_values(
    schema: EntitySchema,
    records: list[dict[str, Any]],
    repository: EntityRepository,
) -> tuple[list[EntityView], list[str]]:
    """Compose an EntityView per record with its display-only values.

    Each display field costs one lookup for the whole list. If a lookup
    fails, that column falls back to the raw key and a single warning is
    reported for it, not one per row.
    """
    views = [EntityView(record=record) for record in records]
    warnings: list[str] = []

    for display_field in schema.display_fields:
        needed = any(not is_empty(_text(r.get(display_field.source_field))) for r in records)
        mapping: dict[str, str] | None = {}
        if needed:
            try:
                mapping = dict(repository.lookup(
                    display_field.table,
                    display_field.key_column,
                    display_field.display_expression,
                ))
            except DataAccessError as e:
                message = lookup_failed(display_field.table, e)
                logger.warning("%s display field %s: %s", schema.name, display_field.name, e)
                warnings.append(message)
                mapping = None

        for view in views:
            view.display[display_field.name] = _display_value(
                display_field, view.record.get(display_field.source_field), mapping
            )

    return views, warnings


def _display_value(
    display_field: DisplayFieldConfig,
    source_value: Any,
    mapping: dict[str, str] | None,
) -> str:
    key = _text(source_value)
    if is_empty(key):
        return display_field.missing or ""
    if mapping is None:
        return key
    if key in mapping:
        return mapping[key]
    return display_field.unknown if display_field.unknown is not None else ""


def sort_views(views: list[EntityView], sort: SortConfig | None) -> list[EntityView]:
    """Stable sort on one column; empty values always go last."""
    if sort is None:
        return list(views)

    present = [v for v in views if not is_empty(_text(v.value(sort.field)))]
    empty = [v for v in views if is_empty(_text(v.value(sort.field)))]
    present.sort(key=lambda v: _sort_key(v.value(sort.field)), reverse=sort.descending)
    return present + empty


def _sort_key(value: Any) -> tuple[int, Any]:
    if isinstance(value, bool):
        return (1, str(value))
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, (date, datetime)):
        return (1, value.isoformat())
    return (1, str(value))


def format_cell(schema: EntitySchema, name: str, value: Any) -> str:
    """Cell text for one value.

    A value that cannot be formatted renders as an empty cell so one bad
    value never aborts the row.
    """
    if value is None:
        return ""
    descriptor = schema.get_field(name)
    try:
        if descriptor is not None and descriptor.type == "date":
            return _format_date_value(value)
        return _text(value)
    except (TypeError, ValueError) as e:
        logger.debug("Could not format %s.%s value %r: %s", schema.name, name, value, e)
        return ""


def _format_date_value(value: Any) -> str:
    if isinstance(value, datetime):
        return format_date(value.date())
    if isinstance(value, date):
        return format_date(value)
    parsed = parse_date(str(value), strict=False)
    return format_date(parsed) if parsed else str(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def build_table(
    schema: EntitySchema,
    records: list[dict[str, Any]],
    repository: EntityRepository,
) -> TableModel:
    views, warnings = resolve_display_values(schema, records, repository)
    views = sort_views(views, schema.default_sort)
    columns = build_columns(schema)
    rows = [
        [format_cell(schema, column.name, view.value(column.name)) for column in columns]
        for view in views
    ]
    return TableModel(
        entity=schema.name,
        columns=columns,
        rows=rows,
        views=views,
        warnings=warnings,
    )
