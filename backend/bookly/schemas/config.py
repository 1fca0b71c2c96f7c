# backend/bookly/schemas/config.py

from pydantic import BaseModel, Field


class ScheduleRead(BaseModel):
    slot_duration_minutes: int = Field(description="Atomic slot length (15..120, step 15)")
    start_of_day: str = Field(description="HH:MM")
    end_of_day: str = Field(description="HH:MM")

    model_config = {"from_attributes": True}


class SlotDurationUpdate(BaseModel):
    slot_duration_minutes: int


class WorkdayHoursUpdate(BaseModel):
    start_of_day: str
    end_of_day: str
