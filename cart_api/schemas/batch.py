from enum import Enum
from typing import Optional, List, Dict, Any, Literal, Union
from pydantic import BaseModel, ConfigDict, Field


class ValidationMode(str, Enum):
    """How failures of individual requests affect the batch."""
    NORMAL = "normal"
    REQUIRE_ALL_VALIDATE = "require-all-validate"


class SubRequest(BaseModel):
    """Single request in a batch."""
    method: Literal["POST", "PUT", "PATCH", "DELETE"] = "POST"
    path: str = Field(..., description="API path, e.g. /cocart/v2/cart/add-item")
    body: Dict[str, Any] = Field(default_factory=dict)
    headers: Dict[str, Union[str, List[str]]] = Field(default_factory=dict)


class BatchEnvelope(BaseModel):
    """Batch API request body.

    The number of requests is checked by the orchestrator so that an empty
    or oversized batch gets the batch error code rather than a schema error.
    """
    model_config = ConfigDict(populate_by_name=True)

    validation_mode: ValidationMode = Field(default=ValidationMode.NORMAL, alias="validation")
    sub_requests: List[SubRequest] = Field(..., alias="requests")


class SubResponse(BaseModel):
    """Single response in a batch."""
    status: int
    body: Any = None
    headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.status >= 400


class BatchResult(BaseModel):
    """Batch API result."""
    responses: List[SubResponse]
    failed_indices: Optional[List[int]] = None

    @property
    def failed(self) -> bool:
        return self.failed_indices is not None

    def to_response(self) -> Dict[str, Any]:
        content: Dict[str, Any] = {}
        if self.failed:
            content["failed"] = "validation"
            content["failed_indices"] = self.failed_indices
        content["responses"] = [r.model_dump() for r in self.responses]
        return content
