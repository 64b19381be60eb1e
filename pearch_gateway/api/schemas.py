from enum import Enum
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator

class SearchType(str, Enum):
    FAST = "fast"
    PRO = "pro"

class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    query: str
    limit: int = Field(default=50, ge=1)
    type: Optional[SearchType] = None
    insights: bool = False
    high_freshness: bool = Field(default=False, alias="highFreshness")
    show_emails: bool = Field(default=False, alias="showEmails")
    show_phone_numbers: bool = Field(default=False, alias="showPhoneNumbers")
    profile_scoring: bool = Field(default=False, alias="profileScoring")

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        if not value or value.strip() == "":
            raise ValueError("Query parameter is required and cannot be empty")
        return value

    @field_validator("type", mode="before")
    @classmethod
    def blank_type_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def to_body(self) -> Dict[str, Any]:
        # booleans are always sent, an unset type is not
        return self.model_dump(mode="json", exclude_none=True)

class PollConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    max_wait_seconds: int = Field(default=600, ge=10, le=3600, alias="maxWaitTime")
    interval_seconds: int = Field(default=15, ge=2, le=60, alias="pollingInterval")

class Credentials(BaseModel):
    base_url: str
    api_key: str

class TaskHandle(BaseModel):
    task_id: str

class Operation(str, Enum):
    SUBMIT = "submit"
    STATUS = "status"
    SUBMIT_AND_WAIT = "submit_and_wait"

class BatchItem(BaseModel):
    json_: Dict[str, Any] = Field(default_factory=dict, alias="json")
    parameters: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True)

class ItemResult(BaseModel):
    json_: Dict[str, Any] = Field(alias="json")
    error: Optional[Dict[str, Any]] = None
    paired_item: int

    model_config = ConfigDict(populate_by_name=True)

class BatchRequest(BaseModel):
    operation: Operation = Operation.SUBMIT_AND_WAIT
    continue_on_fail: bool = False
    items: List[BatchItem]

class BatchResponse(BaseModel):
    results: List[ItemResult] = []

class WaitRequest(BaseModel):
    search: SearchRequest
    poll: PollConfig = Field(default_factory=PollConfig)
