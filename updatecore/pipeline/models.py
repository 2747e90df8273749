"""Data models for pipeline reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class Result(str, Enum):
    """Outcome recorded on a pipeline report."""

    UNSET = ""
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


@dataclass
class Report:
    """
    Mutable outcome of a pipeline, read by the CLI summary.

    Attributes:
        name: Pipeline display name
        pipeline_id: Pipeline identity
        result: Current outcome
        errors: Error messages recorded against the pipeline
        started_at: When processing of the pipeline began
        finished_at: When processing of the pipeline ended
    """

    name: str = ""
    pipeline_id: str = ""
    result: Result = Result.UNSET
    errors: List[str] = field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def failed(self) -> bool:
        return self.result == Result.FAILURE
