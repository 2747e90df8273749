"""Dockerfile crawler.

Emits one manifest per ``FROM <image>:<tag>`` instruction found in files named
``Dockerfile``, ``Dockerfile.*`` or ``*.Dockerfile``.
"""

import fnmatch
import re
from typing import List, Optional, Tuple

from updatecore.logging import get_logger

from .base import BaseCrawler

logger = get_logger(__name__, component="crawler")

FROM_INSTRUCTION = re.compile(
    r"^\s*FROM\s+(?:--platform=\S+\s+)?(?P<image>\S+)(?:\s+AS\s+\S+)?\s*$",
    re.IGNORECASE,
)


def split_image_reference(reference: str) -> Optional[Tuple[str, str]]:
    """Split ``registry/name:tag`` into ``(registry/name, tag)``.

    Returns None for references that cannot be bumped: ``scratch``, digests,
    ARG interpolations and untagged images.

    Example:
        >>> split_image_reference("ghcr.io/acme/app:1.2.3")
        ('ghcr.io/acme/app', '1.2.3')
        >>> split_image_reference("localhost:5000/app") is None
        True
    """
    if reference.lower() == "scratch" or "$" in reference or "@" in reference:
        return None

    name, _, last = reference.rpartition("/")
    if ":" not in last:
        return None

    image, tag = last.split(":", 1)
    if not image or not tag:
        return None

    return (f"{name}/{image}" if name else image), tag


class DockerfileCrawler(BaseCrawler):
    """Find Docker base images that could be bumped."""

    kind = "dockerfile"
    template_name = "dockerfile.yaml.j2"

    @staticmethod
    def is_dockerfile(filename: str) -> bool:
        return fnmatch.fnmatch(filename, "Dockerfile*") or filename.endswith(".Dockerfile")

    def discover(self) -> List[bytes]:
        manifests = []

        for path in self._find_files(self.is_dockerfile):
            relative_path = self.relative(path)
            seen = set()

            for line in self._read_lines(path):
                match = FROM_INSTRUCTION.match(line)
                if not match:
                    continue

                parsed = split_image_reference(match.group("image"))
                if parsed is None:
                    logger.debug(
                        f"Skipping unversioned image reference in {relative_path}",
                        extra={"crawler": self.kind, "reference": match.group("image")},
                    )
                    continue

                image, tag = parsed
                if image in seen:
                    continue
                seen.add(image)

                manifests.append(
                    self._render(
                        {
                            "manifest_name": f'Bump Docker image "{image}" in {relative_path}',
                            "image": image,
                            "tag": tag,
                            "file": relative_path,
                        }
                    )
                )

        return manifests
