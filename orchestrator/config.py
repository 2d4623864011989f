"""Sample workflow configuration."""
from datetime import timedelta
from pydantic_settings import BaseSettings

from adh_integration.models import SummaryType

class WorkflowConfig(BaseSettings):
    """Identifiers and constants of the Data View sample run."""
    # Sample data
    sample_type_id_1: str = "Time_SampleType1"
    sample_type_id_2: str = "Time_SampleType2"
    sample_stream_id_1: str = "dvTank2"
    sample_stream_name_1: str = "Tank2"
    sample_stream_desc_1: str = "A stream to hold sample Pressure and Temperature events"
    sample_stream_id_2: str = "dvTank100"
    sample_stream_name_2: str = "Tank100"
    sample_stream_desc_2: str = "A stream to hold sample Pressure and Ambient Temperature events"
    field_to_consolidate_to: str = "Temperature"
    field_to_consolidate: str = "AmbientTemperature"
    uom_column_1: str = "Pressure"
    uom_column_2: str = "Temperature"
    summary_field: str = "Pressure"
    summary_type_1: SummaryType = SummaryType.MEAN
    summary_type_2: SummaryType = SummaryType.TOTAL
    
    # Data view
    data_view_id: str = "DataView_Sample_Python"
    data_view_name: str = "DataView_Sample_Name_Python"
    data_view_description: str = "A Sample Description that describes that this Data View is just used for our sample."
    query_id: str = "stream"
    query_string: str = "dvTank*"
    sample_range: timedelta = timedelta(hours=1)
    sample_interval: timedelta = timedelta(minutes=20)
    
    # Synthetic values; the cadence does not need to match the view's interval
    data_frequency: timedelta = timedelta(seconds=120)
    pressure_lower_limit: float = 0.0
    pressure_upper_limit: float = 100.0
    temperature_lower_limit: float = 50.0
    temperature_upper_limit: float = 70.0
    random_seed: int = 20
    
    # Null-value demonstration, placed after the sample window so indexes never collide
    null_data_offset: timedelta = timedelta(hours=1)
    null_data_interval: timedelta = timedelta(hours=1)
    
    consistency_delay: float = 0.01  # seconds to wait after deletes before checking them
    
    class Config:
        env_file = ".env"
        env_prefix = "DATAVIEW_SAMPLE_"
