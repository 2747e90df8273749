"""Base crawler class with shared functionality for all crawlers.

A crawler walks a directory tree, recognizes files it knows how to update and
emits one YAML manifest per update opportunity. Manifests are rendered from
Jinja2 templates shipped in ``updatecore/crawlers/templates``.
"""

import fnmatch
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, List, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from updatecore.logging import get_logger

from .exceptions import CrawlerConfigurationError, CrawlerRunError

logger = get_logger(__name__, component="crawler")

# Directories never worth scanning
SKIPPED_DIRECTORIES = frozenset(
    {".git", ".hg", ".svn", "node_modules", ".venv", "venv", "__pycache__", ".tox"}
)

_template_env = Environment(
    loader=PackageLoader("updatecore.crawlers", "templates"),
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


class BaseCrawler(ABC):
    """Base class for all crawlers.

    Subclasses set ``kind`` and implement ``discover()``.

    Recognized settings shared by every crawler:
        ignore: glob patterns (relative to the root directory) to skip
        only: glob patterns; when set, only matching files are considered

    Attributes:
        spec: Crawler settings from the autodiscovery block
        root_dir: Directory to scan
        scm_id: SCM the generated targets are attached to (may be empty)
    """

    kind: ClassVar[str] = ""
    template_name: ClassVar[str] = ""

    def __init__(
        self, spec: Optional[Dict[str, Any]], root_dir: Path, scm_id: str = ""
    ) -> None:
        """Initialize crawler with its settings.

        Raises:
            CrawlerConfigurationError: If settings are malformed or root_dir is not a directory
        """
        self.spec = dict(spec or {})
        self.root_dir = Path(root_dir)
        self.scm_id = scm_id
        self.ignore = self._pattern_list("ignore")
        self.only = self._pattern_list("only")

        if not self.root_dir.is_dir():
            raise CrawlerConfigurationError(
                f"{self.kind} crawler: directory does not exist: {self.root_dir}"
            )

    @abstractmethod
    def discover(self) -> List[bytes]:
        """Scan ``root_dir`` and return one YAML manifest per finding.

        Raises:
            CrawlerRunError: If scanning fails
        """

    def _pattern_list(self, key: str) -> List[str]:
        value = self.spec.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
            raise CrawlerConfigurationError(
                f"{self.kind} crawler: '{key}' must be a list of glob patterns"
            )
        return value

    def _is_selected(self, relative_path: str) -> bool:
        if any(fnmatch.fnmatch(relative_path, pattern) for pattern in self.ignore):
            return False
        if self.only:
            return any(fnmatch.fnmatch(relative_path, pattern) for pattern in self.only)
        return True

    def _find_files(self, match: Callable[[str], bool]) -> List[Path]:
        """Return files under root_dir whose name satisfies ``match``, sorted.

        Args:
            match: Predicate applied to the file name (not the full path)
        """
        found = []
        for dirpath, dirnames, filenames in os.walk(self.root_dir):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRECTORIES)
            for filename in filenames:
                if not match(filename):
                    continue
                path = Path(dirpath) / filename
                if self._is_selected(self.relative(path)):
                    found.append(path)

        return sorted(found)

    def relative(self, path: Path) -> str:
        """Path relative to root_dir, in POSIX form."""
        return path.relative_to(self.root_dir).as_posix()

    def _read_lines(self, path: Path) -> List[str]:
        try:
            return path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise CrawlerRunError(
                f"{self.kind} crawler: failed to read {path}: {e}", crawler=self.kind
            ) from e

    def _render(self, context: Dict[str, Any]) -> bytes:
        """Render this crawler's manifest template."""
        try:
            template = _template_env.get_template(self.template_name)
            return template.render(scmid=self.scm_id, **context).encode("utf-8")
        except TemplateError as e:
            logger.error(
                f"Manifest template rendering failed: {e}",
                extra={"crawler": self.kind, "template": self.template_name},
            )
            raise CrawlerRunError(
                f"{self.kind} crawler: failed to render manifest: {e}", crawler=self.kind
            ) from e
