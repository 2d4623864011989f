"""Sample event schemas and synthetic data for the two tank streams."""
import random
import types
import typing
from datetime import datetime, timedelta
from typing import List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal

from adh_integration.models import SdsType, SdsTypeCode, SdsTypeProperty, SdsTypeReference
from orchestrator.config import WorkflowConfig

class SampleEvent(BaseModel):
    """Base for sample events; `time` is the stream index."""
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)

    time: datetime

class SampleType1(SampleEvent):
    pressure: Optional[float] = None
    temperature: Optional[float] = None

class SampleType2(SampleEvent):
    """Same measurements as SampleType1 from a source that names temperature differently."""
    pressure: Optional[float] = None
    ambient_temperature: Optional[float] = None

_TYPE_CODES = {
    datetime: SdsTypeCode.DATE_TIME,
    float: SdsTypeCode.DOUBLE,
    int: SdsTypeCode.INT32,
    str: SdsTypeCode.STRING,
}

def _type_code(annotation) -> SdsTypeCode:
    args = typing.get_args(annotation)
    origin = typing.get_origin(annotation)
    if (origin is typing.Union or origin is types.UnionType) and type(None) in args:
        inner = [arg for arg in args if arg is not type(None)]
        if inner == [float]:
            return SdsTypeCode.NULLABLE_DOUBLE
        return _type_code(inner[0])
    try:
        return _TYPE_CODES[annotation]
    except KeyError:
        raise TypeError(f"No SDS type code for {annotation!r}") from None

def build_sds_type(type_id: str, event_model: Type[SampleEvent]) -> SdsType:
    """Describe a sample event model as an SDS type, keyed on its Time property."""
    properties = []
    for name, info in event_model.model_fields.items():
        wire_name = info.alias or name
        properties.append(SdsTypeProperty(
            id=wire_name,
            name=wire_name,
            is_key=name == "time",
            sds_type=SdsTypeReference(sds_type_code=_type_code(info.annotation))
        ))
    return SdsType(id=type_id, name=event_model.__name__, properties=properties)

def generate_sample_values(
    start: datetime,
    config: WorkflowConfig,
    rng: Optional[random.Random] = None
) -> Tuple[List[SampleType1], List[SampleType2]]:
    """Evenly spaced random events over [start, start + sample_range] for both streams."""
    rng = rng or random.Random(config.random_seed)

    def pressure() -> float:
        return rng.uniform(config.pressure_lower_limit, config.pressure_upper_limit)

    def temperature() -> float:
        return rng.uniform(config.temperature_lower_limit, config.temperature_upper_limit)

    values_1: List[SampleType1] = []
    values_2: List[SampleType2] = []
    offset = timedelta(0)
    while offset <= config.sample_range:
        timestamp = start + offset
        values_1.append(SampleType1(time=timestamp, pressure=pressure(), temperature=temperature()))
        values_2.append(SampleType2(time=timestamp, pressure=pressure(), ambient_temperature=temperature()))
        offset += config.data_frequency
    return values_1, values_2

def generate_null_values(start: datetime, end: datetime) -> Tuple[List[SampleType1], List[SampleType2]]:
    """Two events per stream, each missing one measurement.

    The first event only has a pressure, the second only a temperature.
    """
    values_1 = [
        SampleType1(time=start, pressure=100),
        SampleType1(time=end, temperature=50),
    ]
    values_2 = [
        SampleType2(time=start, pressure=100),
        SampleType2(time=end, ambient_temperature=50),
    ]
    return values_1, values_2
