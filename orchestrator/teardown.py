"""Best-effort removal of everything the sample created."""
import asyncio
from typing import Awaitable, Callable, List, NamedTuple

import structlog

from orchestrator.models import CleanupReport, CleanupResult, WorkflowState
from shared.exceptions import ResourceNotFoundError

logger = structlog.get_logger()

class CleanupAction(NamedTuple):
    """Delete one resource and later check that it is gone."""
    kind: str
    resource_id: str
    delete: Callable[[str], Awaitable[None]]
    verify: Callable[[str], Awaitable[object]]

def build_cleanup_plan(state: WorkflowState) -> List[List[CleanupAction]]:
    """Cleanup groups in the order they run; a group is verified after all its deletes.

    Groups whose client was never created are left out.
    """
    if state.services is None:
        return []
    config = state.workflow_config
    data_views = state.services.data_views
    metadata = state.services.metadata
    return [
        [
            CleanupAction("data_view", config.data_view_id, data_views.delete_data_view, data_views.get_data_view),
        ],
        [
            CleanupAction("stream", config.sample_stream_id_1, metadata.delete_stream, metadata.get_stream),
            CleanupAction("stream", config.sample_stream_id_2, metadata.delete_stream, metadata.get_stream),
            CleanupAction("type", config.sample_type_id_1, metadata.delete_type, metadata.get_type),
            CleanupAction("type", config.sample_type_id_2, metadata.delete_type, metadata.get_type),
        ],
    ]

async def _delete(action: CleanupAction) -> CleanupResult:
    try:
        await action.delete(action.resource_id)
    except Exception as e:
        logger.error(
            "Delete failed, continuing with cleanup",
            resource_kind=action.kind,
            resource_id=action.resource_id,
            error=str(e),
            error_type=type(e).__name__
        )
        return CleanupResult(
            resource_kind=action.kind,
            resource_id=action.resource_id,
            deleted=False,
            error=str(e),
            exception=e
        )
    return CleanupResult(resource_kind=action.kind, resource_id=action.resource_id, deleted=True)

async def _verify(action: CleanupAction, result: CleanupResult) -> None:
    """Record whether the resource is really gone; a lingering resource is logged, never raised."""
    try:
        await action.verify(action.resource_id)
    except ResourceNotFoundError:
        result.verified = True
        return
    except Exception as e:
        logger.warning(
            "Could not confirm deletion",
            resource_kind=action.kind,
            resource_id=action.resource_id,
            error=str(e)
        )
        result.verified = False
        return

    logger.error(
        "Resource still exists after delete",
        resource_kind=action.kind,
        resource_id=action.resource_id
    )
    result.verified = False

async def run_teardown(state: WorkflowState) -> CleanupReport:
    """Attempt every deletion, whatever failed before, and report each outcome."""
    report = CleanupReport()
    for group in build_cleanup_plan(state):
        results = [await _delete(action) for action in group]
        report.results.extend(results)

        # Deletes are eventually consistent
        await asyncio.sleep(state.workflow_config.consistency_delay)

        for action, result in zip(group, results):
            await _verify(action, result)

    logger.info(
        "Teardown finished",
        attempted=len(report.results),
        failed=len(report.failed),
        unverified=len(report.unverified)
    )
    return report
