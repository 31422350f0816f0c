from typing import Literal

from pydantic import BaseModel, Field


class InstrumentationRules(BaseModel):
    scroll_threshold_percent: float = Field(75.0, gt=0, le=100)
    section_debounce_ms: int = Field(100, ge=0)
    visibility_line_ratio: float = Field(0.5, gt=0, lt=1)

class DashboardRules(BaseModel):
    geographic_limit: int = Field(10, ge=0)
    traffic_source_limit: int = Field(8, ge=0)
    high_bounce_threshold: float = 70.0
    default_date_range: Literal["last7Days", "last30Days", "last90Days"] = "last7Days"
    room_sort: str = "views"

class LoggingRules(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

class Rules(BaseModel):
    instrumentation: InstrumentationRules = Field(default_factory=InstrumentationRules)
    dashboard: DashboardRules = Field(default_factory=DashboardRules)
    logging: LoggingRules = Field(default_factory=LoggingRules)
