"""The forward steps of the Data View sample, in the order they must run.

Each step takes the shared WorkflowState, awaits its remote calls one after
another and returns the updated state.
"""
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, NamedTuple

import structlog

from adh_integration.models import (
    DataItem,
    DataItemResourceType,
    DataView,
    OutputFormat,
    Query,
    SdsStream,
    SummaryDirection,
)
from adh_integration.services import AdhServices
from orchestrator import view_edits
from orchestrator.models import WorkflowState
from orchestrator.renderer import output_interpolated_data, output_stored_data
from orchestrator.sample_data import (
    SampleType1,
    SampleType2,
    build_sds_type,
    generate_null_values,
    generate_sample_values,
)

logger = structlog.get_logger()

StepAction = Callable[[WorkflowState], Awaitable[WorkflowState]]

class WorkflowStep(NamedTuple):
    number: int
    title: str
    action: StepAction

async def authenticate(state: WorkflowState) -> WorkflowState:
    services = AdhServices.create(state.adh_config, transport=state.transport)
    state.services = services
    await services.authenticate()
    state.echo(f"Authenticated as client {state.adh_config.client_id} against {state.adh_config.base_url}")
    return state

async def create_types_streams_and_data(state: WorkflowState) -> WorkflowState:
    config = state.workflow_config
    metadata = state.services.metadata

    type_1 = await metadata.get_or_create_type(build_sds_type(config.sample_type_id_1, SampleType1))
    type_2 = await metadata.get_or_create_type(build_sds_type(config.sample_type_id_2, SampleType2))
    state.sample_types = [type_1, type_2]

    stream_1 = await metadata.get_or_create_stream(SdsStream(
        id=config.sample_stream_id_1,
        name=config.sample_stream_name_1,
        type_id=config.sample_type_id_1,
        description=config.sample_stream_desc_1
    ))
    stream_2 = await metadata.get_or_create_stream(SdsStream(
        id=config.sample_stream_id_2,
        name=config.sample_stream_name_2,
        type_id=config.sample_type_id_2,
        description=config.sample_stream_desc_2
    ))
    state.sample_streams = [stream_1, stream_2]
    for stream in state.sample_streams:
        state.echo(f"Stream {stream.id} ({stream.name}) of type {stream.type_id}")

    state.sample_end = datetime.now(timezone.utc)
    state.sample_start = state.sample_end - config.sample_range
    values_1, values_2 = generate_sample_values(state.sample_start, config)

    await state.services.data.insert_values(config.sample_stream_id_1, values_1)
    await state.services.data.insert_values(config.sample_stream_id_2, values_2)
    state.echo(f"Wrote {len(values_1)} events to each stream from {state.sample_start.isoformat()} to {state.sample_end.isoformat()}")
    return state

async def create_data_view(state: WorkflowState) -> WorkflowState:
    config = state.workflow_config
    data_view = DataView(
        id=config.data_view_id,
        name=config.data_view_name,
        description=config.data_view_description
    )
    state.data_view = await state.services.data_views.create_or_update_data_view(data_view)
    state.echo(f"Saved data view {state.data_view.id}")
    return state

async def retrieve_data_view(state: WorkflowState) -> WorkflowState:
    data_view = await state.services.data_views.get_data_view(state.workflow_config.data_view_id)
    state.data_view = data_view
    state.echo("")
    state.echo("Retrieved Data View:")
    state.echo(f"ID: {data_view.id}, Name: {data_view.name}, Description: {data_view.description}")
    state.echo("")
    return state

async def add_query(state: WorkflowState) -> WorkflowState:
    config = state.workflow_config
    query = Query(id=config.query_id, value=config.query_string, kind=DataItemResourceType.STREAM)
    view_edits.add_query(state.data_view, query)
    state.query = query

    await state.services.data_views.create_or_update_data_view(state.data_view)
    state.echo(f"Added query {query.id} = '{query.value}' ({query.kind.value})")
    return state

def _echo_items(state: WorkflowState, heading: str, items: List[DataItem]) -> None:
    state.echo(heading)
    for item in items:
        state.echo(f"Name: {item.name}; ID: {item.id}")
    state.echo("")

async def show_resolved_items(state: WorkflowState) -> WorkflowState:
    data_views = state.services.data_views
    resolved = await data_views.get_data_items(state.data_view.id, state.query.id)
    ineligible = await data_views.get_ineligible_data_items(state.data_view.id, state.query.id)

    state.echo("")
    _echo_items(state, f"Resolved data items for query {state.query.id}:", resolved.items)
    _echo_items(state, f"Ineligible data items for query {state.query.id}:", ineligible.items)
    return state

async def show_available_fields(state: WorkflowState) -> WorkflowState:
    available = await state.services.data_views.get_available_field_sets(state.data_view.id)
    state.available_field_sets = available.items

    state.echo("")
    state.echo(f"Available fields for data view {state.data_view.name}:")
    for field_set in available.items:
        state.echo(f"  QueryId: {field_set.query_id}")
        state.echo("  Data Fields: ")
        for field in field_set.data_fields:
            line = f"    Label: {field.label}, Source: {field.source.value}"
            line += "".join(f", Key: {key}" for key in field.keys)
            state.echo(line)
    state.echo("")
    return state

async def _save_and_render(state: WorkflowState) -> WorkflowState:
    """Persist the local view, then print both the interpolated and the stored table."""
    data_views = state.services.data_views
    await data_views.create_or_update_data_view(state.data_view)

    form = state.adh_config.output_format
    await output_interpolated_data(
        data_views,
        state.data_view.id,
        state.sample_start,
        state.sample_end,
        state.workflow_config.sample_interval,
        form=form,
        echo=state.echo
    )
    await output_stored_data(
        data_views,
        state.data_view.id,
        state.sample_start,
        state.sample_end,
        form=form,
        echo=state.echo
    )
    return state

async def include_available_fields(state: WorkflowState) -> WorkflowState:
    view_edits.add_field_sets(state.data_view, state.available_field_sets)
    return await _save_and_render(state)

async def group_data_view(state: WorkflowState) -> WorkflowState:
    view_edits.add_grouping_field(state.data_view, view_edits.identity_field())
    return await _save_and_render(state)

async def identify_data_items(state: WorkflowState) -> WorkflowState:
    view_edits.set_identifying_fields(state.data_view)
    return await _save_and_render(state)

async def consolidate_fields(state: WorkflowState) -> WorkflowState:
    config = state.workflow_config
    field_set = view_edits.single_field_set(state.data_view, config.query_id)
    surviving = view_edits.consolidate_fields(field_set, config.field_to_consolidate, config.field_to_consolidate_to)
    logger.info("Consolidated fields", keys=surviving.keys, field_count=len(field_set.data_fields))
    return await _save_and_render(state)

async def add_uom_columns(state: WorkflowState) -> WorkflowState:
    config = state.workflow_config
    field_set = view_edits.single_field_set(state.data_view, config.query_id)
    view_edits.include_uom(field_set, [config.uom_column_1, config.uom_column_2])
    return await _save_and_render(state)

async def add_summary_columns(state: WorkflowState) -> WorkflowState:
    config = state.workflow_config
    field_set = view_edits.single_field_set(state.data_view, config.query_id)
    view_edits.add_summary_fields(
        field_set,
        config.summary_field,
        [
            (SummaryDirection.FORWARD, config.summary_type_1),
            (SummaryDirection.FORWARD, config.summary_type_2),
        ]
    )
    return await _save_and_render(state)

async def demonstrate_verbosity(state: WorkflowState) -> WorkflowState:
    config = state.workflow_config
    data_views = state.services.data_views
    # Only JSON rows can omit a field; in CSV a null is an empty cell either way
    form = OutputFormat.DEFAULT

    state.echo("Writing null values to the streams")
    state.null_data_start = datetime.now(timezone.utc) + config.null_data_offset
    state.null_data_end = state.null_data_start + config.null_data_interval
    values_1, values_2 = generate_null_values(state.null_data_start, state.null_data_end)
    await state.services.data.insert_values(config.sample_stream_id_1, values_1)
    await state.services.data.insert_values(config.sample_stream_id_2, values_2)

    for verbose in (True, False):
        if verbose:
            state.echo("Data View results will include null values if the accept-verbosity header is not set to non-verbose.")
        else:
            state.echo("Changing the verbosity setting to non-verbose")
            state.echo("Data View results will not include null values if the accept-verbosity header is set to non-verbose.")
        await output_interpolated_data(
            data_views,
            state.data_view.id,
            state.null_data_start,
            state.null_data_end,
            config.null_data_interval,
            form=form,
            verbose=verbose,
            echo=state.echo
        )
        await output_stored_data(
            data_views,
            state.data_view.id,
            state.null_data_start,
            state.null_data_end,
            form=form,
            verbose=verbose,
            echo=state.echo
        )
    return state

STEPS: List[WorkflowStep] = [
    WorkflowStep(1, "Authenticate Against ADH", authenticate),
    WorkflowStep(2, "Create types, streams, and data", create_types_streams_and_data),
    WorkflowStep(3, "Create a Data View", create_data_view),
    WorkflowStep(4, "Retrieve the Data View", retrieve_data_view),
    WorkflowStep(5, "Add a Query for Data Items", add_query),
    WorkflowStep(6, "View Items Found by the Query", show_resolved_items),
    WorkflowStep(7, "View Fields Available to Include in the Data View", show_available_fields),
    WorkflowStep(8, "Include Some of the Available Fields", include_available_fields),
    WorkflowStep(9, "Group the Data View", group_data_view),
    WorkflowStep(10, "Identify Data Items", identify_data_items),
    WorkflowStep(11, "Consolidate Data Fields", consolidate_fields),
    WorkflowStep(12, "Add Units of Measure Column", add_uom_columns),
    WorkflowStep(13, "Add Summaries Columns", add_summary_columns),
    WorkflowStep(14, "Demonstrate accept-verbosity header usage", demonstrate_verbosity),
]
