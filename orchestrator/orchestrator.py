"""Main orchestration logic for the Data View sample walkthrough."""
from typing import Callable, List, Optional
from datetime import datetime
import httpx
import structlog

from adh_integration.config import AdhConfig
from orchestrator.config import WorkflowConfig
from orchestrator.models import StepResult, WorkflowResult, WorkflowState
from orchestrator.steps import STEPS, WorkflowStep
from orchestrator.teardown import run_teardown
from shared.exceptions import WorkflowStepError

logger = structlog.get_logger()

TEARDOWN_STEP = 15

class DataViewWorkflow:
    """Run the sample steps strictly in order, then always tear down.

    The first failure stops the forward steps and becomes the run's verdict;
    cleanup errors only become the verdict when setup succeeded.
    """

    def __init__(
        self,
        adh_config: AdhConfig,
        workflow_config: Optional[WorkflowConfig] = None,
        steps: Optional[List[WorkflowStep]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        echo: Callable[[str], None] = print
    ):
        self.adh_config = adh_config
        self.workflow_config = workflow_config or WorkflowConfig()
        self.steps = list(steps) if steps is not None else list(STEPS)
        self.transport = transport
        self.echo = echo

    async def execute(self) -> WorkflowResult:
        """Run every step and the teardown, returning the full outcome without raising.

        Cancellation is the exception: teardown still runs, then CancelledError propagates.
        """
        state = WorkflowState(
            adh_config=self.adh_config,
            workflow_config=self.workflow_config,
            transport=self.transport,
            echo=self.echo
        )
        result = WorkflowResult()

        try:
            for step in self.steps:
                self.echo(f"Step {step.number}: {step.title}")
                logger.info("Running step", step=step.number, title=step.title)
                try:
                    state = await step.action(state)
                except Exception as e:
                    logger.error(
                        "Step failed, skipping to cleanup",
                        step=step.number,
                        title=step.title,
                        error=str(e),
                        error_type=type(e).__name__,
                        exc_info=True
                    )
                    error = WorkflowStepError(step.number, step.title, e)
                    error.__cause__ = e
                    result.first_error = error
                    result.steps.append(StepResult(
                        step_number=step.number,
                        title=step.title,
                        succeeded=False,
                        error=str(e),
                        timestamp=datetime.utcnow()
                    ))
                    break

                result.steps.append(StepResult(
                    step_number=step.number,
                    title=step.title,
                    succeeded=True,
                    timestamp=datetime.utcnow()
                ))
        finally:
            self.echo(f"Step {TEARDOWN_STEP}: Delete Sample Objects from ADH")
            try:
                result.cleanup = await run_teardown(state)
                if result.first_error is None:
                    result.first_error = result.cleanup.first_error
            finally:
                if state.services is not None:
                    await state.services.aclose()

        logger.info(
            "Sample run finished",
            succeeded=result.succeeded,
            steps_completed=sum(1 for step in result.steps if step.succeeded),
            cleanup_failures=len(result.cleanup.failed)
        )
        return result

    async def run(self, test: bool = False) -> bool:
        """Run the sample.

        Normally the first error is raised once cleanup is done. In test mode it is
        swallowed and the verdict comes back as a boolean.
        """
        result = await self.execute()
        if result.first_error is not None and not test:
            raise result.first_error
        return result.succeeded
