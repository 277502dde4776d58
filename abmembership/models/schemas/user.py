from typing import Any, Dict, List
from pydantic import BaseModel, Field


class UserKeysResponseModel(BaseModel):
    user_id: str
    keys: Dict[str, Any] = Field(default_factory=dict, description="Stored key -> value.")


class UserKeyValueModel(BaseModel):
    value: Any


class CleanupResponseModel(BaseModel):
    user_id: str
    deleted: List[str] = Field(default_factory=list)
    remaining: List[str] = Field(default_factory=list)


class ActiveExperimentsResponseModel(BaseModel):
    user_id: str
    experiments: Dict[str, Any] = Field(
        default_factory=dict, description="Experiment name -> assigned alternative."
    )
