"""
Compliance screening models.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

PENDING_STATUS = 'PENDING'

# Synthetic verdict used when screening does not finish in time
SEVERITY_ERROR = 'ERROR'


class ScreeningState(str, Enum):
    """Lifecycle of one screening run."""

    SUBMITTED = 'SUBMITTED'
    POLLING = 'POLLING'
    COMPLETE = 'COMPLETE'
    TIMED_OUT = 'TIMED_OUT'


class SubmissionResult(BaseModel):
    """Answer of the screening registration call."""

    model_config = ConfigDict(extra='ignore')

    transaction_id: Annotated[str, Field(
        min_length=1,
        description='Upstream identifier of the screening job'
    )]


class ScreeningJob(BaseModel):
    """One screening job as reported by the transaction status endpoint."""

    model_config = ConfigDict(extra='ignore')

    transaction_id: Optional[str] = None
    overall_severity: Optional[str] = None
    screening_status: Optional[str] = None
    # Null while the report is still being generated
    report_generation_complete: Optional[bool] = None

    @property
    def is_complete(self) -> bool:
        return self.screening_status != PENDING_STATUS and bool(self.report_generation_complete)


class ScreeningResult(BaseModel):
    """Verdict attached to a stored notification."""

    transaction_id: Annotated[str, Field(
        description='Upstream identifier of the screening job'
    )]

    overall_severity: Annotated[str, Field(
        description='Severity reported by the upstream, or ERROR on timeout',
        examples=['LOW', 'HIGH', SEVERITY_ERROR]
    )]
