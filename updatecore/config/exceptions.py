"""Errors raised for invalid manifests and process settings."""

from typing import List, Optional


class ConfigurationError(Exception):
    """
    A manifest or process setting is invalid.

    Carries every problem found so one run reports them all, plus hints on
    how to fix them. ``str(error)`` renders all three parts.

    Attributes:
        message: One-line summary
        errors: Individual problems, in discovery order
        suggestions: Hints shown after the problems
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.errors = list(errors or [])
        self.suggestions = list(suggestions or [])
        super().__init__(self.render())

    def render(self) -> str:
        lines = [self.message]
        if self.errors:
            lines += ["", "Validation Errors:"]
            lines += [f"  {n}. {problem}" for n, problem in enumerate(self.errors, 1)]
        if self.suggestions:
            lines += ["", "Suggestions:"]
            lines += [f"  - {hint}" for hint in self.suggestions]
        return "\n".join(lines)


class ManifestDecodeError(ConfigurationError):
    """Crawler output could not be decoded into a manifest.

    Attributes:
        origin: Where the bytes came from (position in crawler output, parent name)
    """

    def __init__(
        self,
        message: str,
        origin: str = "",
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.origin = origin
        super().__init__(message, errors=errors, suggestions=suggestions)
