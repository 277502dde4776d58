from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class ExperimentModel(BaseModel):
    """Read-only experiment descriptor as seen by user state cleanup."""

    name: str
    version: Optional[int] = Field(
        None, description="Current version; treated as 1 when not set."
    )
    start_time: Optional[datetime] = Field(
        None, description="When the experiment started; None if it has not started yet."
    )
    winner: Optional[str] = Field(None, description="Name of the winning alternative.")
    alternatives: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @property
    def has_winner(self) -> bool:
        return self.winner is not None


class ExperimentCreateModel(BaseModel):
    """Schema for creating a new experiment (API input)."""

    name: str = Field(..., min_length=1, pattern=r"^[^:]+$")
    alternatives: List[str] = Field(..., min_length=1)
    start: bool = Field(False, description="Start the experiment immediately.")


class WinnerModel(BaseModel):
    alternative: str
