"""Custom exceptions for pipeline construction."""

from typing import List, Optional


class PipelineInitError(Exception):
    """A manifest could not be turned into a runnable pipeline.

    Attributes:
        manifest_name: Display name of the offending manifest
        problems: Every validation problem found
    """

    def __init__(self, manifest_name: str, problems: Optional[List[str]] = None) -> None:
        self.manifest_name = manifest_name
        self.problems = problems or []
        super().__init__(f'"{manifest_name}" - {"; ".join(self.problems)}')
