"""Source-control bindings of a pipeline.

Only the location of the managed working copy matters to autodiscovery:
crawlers of a parent pipeline bound to an SCM scan that directory instead of
the process working directory. Cloning and committing happen elsewhere.
"""

import re
from pathlib import Path
from typing import List
from urllib.parse import urlsplit

from updatecore.config.models import ScmConfig

HOSTED_KINDS = frozenset({"github", "gitlab", "gitea", "bitbucket"})
GIT_KIND = "git"

_SCP_LIKE_URL = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>[^/].*)$")
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_segments(parts: List[str]) -> List[str]:
    segments = [_UNSAFE_CHARS.sub("_", part) for part in parts if part not in ("", ".", "..")]
    return [segment for segment in segments if segment.strip("_")]


def git_url_segments(url: str) -> List[str]:
    """Split a git URL into ``[host, *path]`` directory segments.

    Example:
        >>> git_url_segments("git@github.com:acme/app.git")
        ['github.com', 'acme', 'app']
    """
    url = url.strip()
    scp_match = None if "://" in url else _SCP_LIKE_URL.match(url)
    if scp_match:
        host, path = scp_match.group("host"), scp_match.group("path")
    else:
        parts = urlsplit(url)
        host, path = parts.hostname or "", parts.path

    if path.endswith(".git"):
        path = path[: -len(".git")]

    return _safe_segments([host, *path.split("/")])


class Scm:
    """A configured SCM together with its managed working copy location.

    Attributes:
        config: SCM settings from the manifest
        directory: Where the working copy of this SCM lives
    """

    def __init__(self, config: ScmConfig, workdir: Path):
        """
        Raises:
            ValueError: If the kind is unsupported or required settings are missing
        """
        self.config = config
        self.directory = Path(workdir).joinpath(*self._directory_segments())

    def _directory_segments(self) -> List[str]:
        kind = self.config.kind.strip().lower()
        spec = self.config.spec

        if kind in HOSTED_KINDS:
            missing = [key for key in ("owner", "repository") if not spec.get(key)]
            if missing:
                raise ValueError(f"{kind} scm requires {' and '.join(missing)}")
            return _safe_segments([kind, str(spec["owner"]), str(spec["repository"])])

        if kind == GIT_KIND:
            url = spec.get("url")
            if not url:
                raise ValueError("git scm requires url")
            segments = git_url_segments(str(url))
            if not segments:
                raise ValueError(f"git scm url cannot be turned into a directory: {url}")
            return [GIT_KIND, *segments]

        supported = ", ".join(sorted(HOSTED_KINDS | {GIT_KIND}))
        raise ValueError(f"unsupported scm kind '{self.config.kind}' (supported: {supported})")

    def get_directory(self) -> Path:
        return self.directory
