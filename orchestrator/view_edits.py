"""In-memory edits of a Data View definition.

These only change the local copy; the caller persists it with
create_or_update_data_view afterwards.
"""
from typing import Iterable, List, Tuple

from adh_integration.models import (
    DataView,
    Field,
    FieldSet,
    FieldSource,
    Query,
    SummaryDirection,
    SummaryType,
)
from shared.exceptions import ValidationError

IDENTITY_LABEL = "{IdentifyingValue} {Key}"

def identity_field() -> Field:
    """Field derived from the identity of each data item."""
    return Field(source=FieldSource.ID, label=IDENTITY_LABEL)

def single_field_set(data_view: DataView, query_id: str) -> FieldSet:
    matches = [field_set for field_set in data_view.data_field_sets if field_set.query_id == query_id]
    if len(matches) != 1:
        raise ValidationError(
            f"Expected exactly one field set for query '{query_id}' in data view '{data_view.id}', found {len(matches)}"
        )
    return matches[0]

def single_field_with_key(field_set: FieldSet, key: str) -> Field:
    matches = [field for field in field_set.data_fields if key in field.keys]
    if len(matches) != 1:
        raise ValidationError(
            f"Expected exactly one field with key '{key}' in field set '{field_set.query_id}', found {len(matches)}"
        )
    return matches[0]

def add_query(data_view: DataView, query: Query) -> DataView:
    if any(existing.id == query.id for existing in data_view.queries):
        raise ValidationError(f"Data view '{data_view.id}' already has a query '{query.id}'")
    data_view.queries.append(query)
    return data_view

def add_field_sets(data_view: DataView, field_sets: Iterable[FieldSet]) -> DataView:
    """Include field sets; each one must belong to a query of the view."""
    query_ids = {query.id for query in data_view.queries}
    for field_set in field_sets:
        if field_set.query_id not in query_ids:
            raise ValidationError(f"Field set references unknown query '{field_set.query_id}'")
        data_view.data_field_sets.append(field_set)
    return data_view

def add_grouping_field(data_view: DataView, field: Field) -> DataView:
    data_view.grouping_fields.append(field)
    return data_view

def set_identifying_fields(data_view: DataView) -> DataView:
    """Give every field set its own identity field so each group's columns are labelled per item."""
    for field_set in data_view.data_field_sets:
        field_set.identifying_field = identity_field()
    return data_view

def consolidate_fields(field_set: FieldSet, remove_key: str, into_key: str) -> Field:
    """Fold the field holding `remove_key` into the field holding `into_key`.

    Returns the surviving field, whose keys now include `remove_key`.
    """
    removed = single_field_with_key(field_set, remove_key)
    surviving = single_field_with_key(field_set, into_key)
    if removed is surviving:
        raise ValidationError(f"Keys '{remove_key}' and '{into_key}' are already in the same field")
    field_set.data_fields.remove(removed)
    for key in removed.keys:
        if key not in surviving.keys:
            surviving.keys.append(key)
    return surviving

def include_uom(field_set: FieldSet, keys: Iterable[str]) -> List[Field]:
    fields = [single_field_with_key(field_set, key) for key in keys]
    for field in fields:
        field.include_uom = True
    return fields

def add_summary_fields(
    field_set: FieldSet,
    key: str,
    summaries: Iterable[Tuple[SummaryDirection, SummaryType]]
) -> List[Field]:
    """Append one clone of the keyed field per (direction, type) pair."""
    source = single_field_with_key(field_set, key)
    added = []
    for direction, summary_type in summaries:
        summary_field = source.clone()
        summary_field.summary_direction = direction
        summary_field.summary_type = summary_type
        added.append(summary_field)
    field_set.data_fields.extend(added)
    return added
