"""ADH wire models for Sequential Data Store (SDS) and Data Views."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal

T = TypeVar("T")


class WireModel(BaseModel):
    """Base for models exchanged with ADH; the service speaks PascalCase JSON."""
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- SDS -------------------------------------------------------------------

class SdsTypeCode(str, Enum):
    OBJECT = "Object"
    DATE_TIME = "DateTime"
    DOUBLE = "Double"
    NULLABLE_DOUBLE = "NullableDouble"
    STRING = "String"
    INT32 = "Int32"


class SdsTypeReference(WireModel):
    sds_type_code: SdsTypeCode


class SdsTypeProperty(WireModel):
    """One named, typed property of an SDS type."""
    id: str
    name: Optional[str] = None
    is_key: bool = False
    sds_type: SdsTypeReference


class SdsType(WireModel):
    """Type definition: an id plus an ordered event schema."""
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    sds_type_code: SdsTypeCode = SdsTypeCode.OBJECT
    properties: List[SdsTypeProperty] = []


class SdsStream(WireModel):
    """Stream of events of one SDS type."""
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    type_id: str


# --- Data Views ------------------------------------------------------------

class DataItemResourceType(str, Enum):
    STREAM = "Stream"
    ASSET = "Asset"


class FieldSource(str, Enum):
    NOT_APPLICABLE = "NotApplicable"
    ID = "Id"
    NAME = "Name"
    PROPERTY_ID = "PropertyId"
    PROPERTY_NAME = "PropertyName"
    METADATA = "Metadata"
    TAGS = "Tags"


class SummaryDirection(str, Enum):
    FORWARD = "Forward"
    BACKWARD = "Backward"


class SummaryType(str, Enum):
    COUNT = "Count"
    MINIMUM = "Minimum"
    MAXIMUM = "Maximum"
    RANGE = "Range"
    MEAN = "Mean"
    STANDARD_DEVIATION = "StandardDeviation"
    TOTAL = "Total"
    SKEWNESS = "Skewness"
    KURTOSIS = "Kurtosis"
    WEIGHTED_MEAN = "WeightedMean"
    WEIGHTED_STANDARD_DEVIATION = "WeightedStandardDeviation"
    POPULATION_STANDARD_DEVIATION = "PopulationStandardDeviation"


class DataViewShape(str, Enum):
    STANDARD = "Standard"
    NARROW = "Narrow"


class Query(WireModel):
    """Pattern over one resource kind that selects the items of a view."""
    id: str
    value: str
    kind: DataItemResourceType = DataItemResourceType.STREAM


class Field(WireModel):
    """One output column definition."""
    source: FieldSource = FieldSource.NOT_APPLICABLE
    keys: List[str] = []
    stream_reference_names: List[str] = []
    label: Optional[str] = None
    include_uom: bool = False
    summary_direction: Optional[SummaryDirection] = None
    summary_type: Optional[SummaryType] = None

    def clone(self) -> "Field":
        """Independent deep copy; no list is shared with the original."""
        return self.model_copy(deep=True)


class FieldSet(WireModel):
    """Output columns derived from one query's resolved items."""
    query_id: str
    data_fields: List[Field] = []
    identifying_field: Optional[Field] = None


class DataView(WireModel):
    """Server-persisted definition of a computed table over many streams."""
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    queries: List[Query] = []
    data_field_sets: List[FieldSet] = []
    grouping_fields: List[Field] = []
    index_field: Optional[Field] = None
    index_type_code: Optional[SdsTypeCode] = None
    default_start_index: Optional[str] = None
    default_end_index: Optional[str] = None
    default_interval: Optional[str] = None
    shape: Optional[DataViewShape] = None


class DataItem(WireModel):
    """A concrete resource a query resolved to."""
    id: str
    name: Optional[str] = None
    type_id: Optional[str] = None
    resource_type: Optional[DataItemResourceType] = None
    tags: List[str] = []
    metadata: List[Dict[str, Any]] = []


class ResolvedItems(WireModel, Generic[T]):
    items: List[T] = []
    time_of_resolution: Optional[datetime] = None


# --- data retrieval --------------------------------------------------------

class OutputFormat(str, Enum):
    DEFAULT = "default"
    CSV = "csv"
    CSV_HEADER = "csvh"


class CacheBehavior(str, Enum):
    PRESERVE = "Preserve"
    REFRESH = "Refresh"


class DataRequestOptions(BaseModel):
    """Request-scoped settings for one data retrieval call.

    verbose=None defers to the client-wide VerbosityHeaderHandler default.
    """
    verbose: Optional[bool] = None
    cache: CacheBehavior = CacheBehavior.REFRESH
    form: OutputFormat = OutputFormat.CSV_HEADER
    count: Optional[int] = None
    filter: Optional[str] = None
