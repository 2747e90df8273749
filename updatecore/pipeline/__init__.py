"""Runtime pipelines built from manifests."""

from .exceptions import PipelineInitError
from .models import Report, Result
from .pipeline import Action, Pipeline, PipelineOptions
from .scm import Scm

__all__ = [
    "Pipeline",
    "PipelineOptions",
    "Action",
    "Scm",
    "Report",
    "Result",
    "PipelineInitError",
]
