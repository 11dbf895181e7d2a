from __future__ import annotations

from pydantic import BaseModel, Field


class TimerOut(BaseModel):
    timer_id: str = Field(..., alias="timerId")
    description: str
    start: int
    end: int | None = None
    duration: int | None = None
    is_active: bool = Field(..., alias="isActive")

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "timerId": "2f0c7b1d9a4e4c55b5d0e1f8a3c6b7d2",
                "description": "write report",
                "start": 1717236000000,
                "end": 1717236001500,
                "duration": 1500,
                "isActive": False,
            }
        },
    }


class ActiveTimerOut(TimerOut):
    # Elapsed milliseconds at broadcast time; never stored.
    duration: int


def dump_timer(timer: TimerOut) -> dict:
    """Wire form: camelCase keys; ``end``/``duration`` only once stopped."""
    return timer.model_dump(by_alias=True, exclude_none=True)
