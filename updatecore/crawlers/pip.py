"""Pip requirements crawler.

Emits one manifest per ``name==version`` pin found in ``requirements*.txt``.
"""

import fnmatch
import re
from typing import List

from .base import BaseCrawler

PINNED_REQUIREMENT = re.compile(
    r"^(?P<name>[A-Za-z0-9][A-Za-z0-9._-]*)(?:\[[^\]]*\])?\s*==\s*(?P<version>[^\s;#]+)"
)


class PipRequirementsCrawler(BaseCrawler):
    """Find pinned Python requirements that could be bumped."""

    kind = "pip"
    template_name = "pip.yaml.j2"

    @staticmethod
    def is_requirements_file(filename: str) -> bool:
        return fnmatch.fnmatch(filename, "requirements*.txt")

    def discover(self) -> List[bytes]:
        manifests = []

        for path in self._find_files(self.is_requirements_file):
            relative_path = self.relative(path)

            for line in self._read_lines(path):
                stripped = line.strip()
                # Options (-r, -e, --hash...) and comments carry no pins
                if not stripped or stripped.startswith(("#", "-")):
                    continue

                match = PINNED_REQUIREMENT.match(stripped)
                if not match:
                    continue

                package = match.group("name")
                manifests.append(
                    self._render(
                        {
                            "manifest_name": f'Bump Python package "{package}" in {relative_path}',
                            "package": package,
                            "version": match.group("version"),
                            "file": relative_path,
                            "match_pattern": rf"(?im)^{re.escape(package)}(\[[^\]]*\])?\s*==\s*[^\s;#]+",
                        }
                    )
                )

        return manifests
