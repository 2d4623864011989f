"""Orchestrator data models."""
from pydantic import BaseModel, ConfigDict
from typing import Callable, List, Optional
from datetime import datetime

import httpx

from adh_integration.config import AdhConfig
from adh_integration.models import DataView, FieldSet, Query, SdsStream, SdsType
from adh_integration.services import AdhServices
from orchestrator.config import WorkflowConfig

class WorkflowState(BaseModel):
    """Everything the steps share; steps read it and return it updated."""
    model_config = ConfigDict(arbitrary_types_allowed=True)
    
    adh_config: AdhConfig
    workflow_config: WorkflowConfig
    services: Optional[AdhServices] = None
    transport: Optional[httpx.AsyncBaseTransport] = None
    echo: Callable[[str], None] = print
    sample_types: List[SdsType] = []
    sample_streams: List[SdsStream] = []
    sample_start: Optional[datetime] = None
    sample_end: Optional[datetime] = None
    null_data_start: Optional[datetime] = None
    null_data_end: Optional[datetime] = None
    data_view: Optional[DataView] = None
    query: Optional[Query] = None
    available_field_sets: List[FieldSet] = []

class StepResult(BaseModel):
    """Outcome of one forward step."""
    step_number: int
    title: str
    succeeded: bool
    error: Optional[str] = None
    timestamp: datetime

class CleanupResult(BaseModel):
    """Outcome of deleting one resource and checking that it is gone."""
    model_config = ConfigDict(arbitrary_types_allowed=True)
    
    resource_kind: str
    resource_id: str
    deleted: bool
    error: Optional[str] = None
    verified: Optional[bool] = None  # None until the existence check has run
    exception: Optional[Exception] = None

class CleanupReport(BaseModel):
    """All cleanup results of a teardown, in the order they ran."""
    results: List[CleanupResult] = []
    
    @property
    def failed(self) -> List[CleanupResult]:
        return [result for result in self.results if not result.deleted]
    
    @property
    def unverified(self) -> List[CleanupResult]:
        return [result for result in self.results if result.verified is False]
    
    @property
    def first_error(self) -> Optional[Exception]:
        for result in self.results:
            if result.exception is not None:
                return result.exception
        return None

class WorkflowResult(BaseModel):
    """Verdict of a whole run."""
    model_config = ConfigDict(arbitrary_types_allowed=True)
    
    steps: List[StepResult] = []
    cleanup: CleanupReport = CleanupReport()
    first_error: Optional[Exception] = None
    
    @property
    def succeeded(self) -> bool:
        return self.first_error is None
