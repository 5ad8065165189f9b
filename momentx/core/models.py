"""
Data models and type definitions for MomentX.

Provides type-safe data structures for publish results, transaction effects,
dynamic field pages and pipeline results.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WorkflowType(str, Enum):
    """Types of workflows in the system."""

    RUN = "run"


class ProcessingStatus(str, Enum):
    """Status of processing operations."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class PaginationState(str, Enum):
    """States of the dynamic field pagination loop."""

    HAS_MORE = "has_more"
    DONE = "done"


# Ledger Models


class PublishResult(BaseModel):
    """Identifiers of a freshly published package and its global object."""

    module_id: str = Field(..., min_length=1)
    global_object_id: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)


class MoveCall(BaseModel):
    """A single entry function invocation."""

    package_object_id: str
    module: str
    function: str
    type_arguments: List[str] = Field(default_factory=list)
    arguments: List[Any] = Field(default_factory=list)
    gas_budget: int = Field(default=100000, gt=0)

    model_config = ConfigDict(frozen=True)

    @property
    def target(self) -> str:
        return f"{self.package_object_id}::{self.module}::{self.function}"


class TransactionResult(BaseModel):
    """Parsed view of an executed transaction."""

    digest: Optional[str] = None
    status: str = "success"
    events: List[Dict[str, Any]] = Field(default_factory=list)
    new_objects: List[Dict[str, Any]] = Field(default_factory=list)
    created_object_ids: List[str] = Field(default_factory=list)
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class DynamicFieldInfo(BaseModel):
    """One entry of a dynamic field page."""

    name: Any = None
    object_id: str
    object_type: Optional[str] = None
    version: Optional[int] = None
    digest: Optional[str] = None

    @classmethod
    def from_rpc(cls, entry: Dict[str, Any]) -> "DynamicFieldInfo":
        return cls(
            name=entry.get("name"),
            object_id=entry["objectId"],
            object_type=entry.get("objectType"),
            version=entry.get("version"),
            digest=entry.get("digest"),
        )


class DynamicFieldPage(BaseModel):
    """A page of dynamic fields and the cursor of the next page."""

    data: List[DynamicFieldInfo] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def parse_entries(cls, v):
        """Coerce RPC dictionaries into DynamicFieldInfo instances."""
        if isinstance(v, list):
            return [DynamicFieldInfo.from_rpc(item) if isinstance(item, dict) else item for item in v]
        return v or []

    @property
    def state(self) -> PaginationState:
        return PaginationState.DONE if self.next_cursor is None else PaginationState.HAS_MORE


class QueryReport(BaseModel):
    """Everything collected by the query phase."""

    global_object: Dict[str, Any] = Field(default_factory=dict)
    merchants: Any = None
    collection_id: Optional[str] = None
    pages: List[DynamicFieldPage] = Field(default_factory=list)
    nft_objects: List[Dict[str, Any]] = Field(default_factory=list)
    nft_by_user: Optional[Dict[str, Any]] = None


# Processing Models


class StepResult(BaseModel):
    """Result of one pipeline step."""

    name: str
    status: ProcessingStatus = Field(default=ProcessingStatus.PENDING)
    outputs: Dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None
    duration_seconds: Optional[float] = None


class ProcessingResult(BaseModel):
    """Result of a workflow run."""

    workflow_type: WorkflowType
    status: ProcessingStatus = Field(default=ProcessingStatus.PENDING)
    correlation_id: Optional[str] = None

    # Timing
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    steps: List[StepResult] = Field(default_factory=list)

    # Error tracking
    error_message: Optional[str] = None
    error_details: Dict[str, Any] = Field(default_factory=dict)

    # Data
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def completed_steps(self) -> List[str]:
        return [s.name for s in self.steps if s.status == ProcessingStatus.COMPLETED]
