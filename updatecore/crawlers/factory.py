"""Factory function for instantiating crawlers."""

from pathlib import Path
from typing import Any, Dict, Optional, Type

from updatecore.logging import get_logger

from .base import BaseCrawler
from .dockerfile import DockerfileCrawler
from .exceptions import CrawlerConfigurationError, CrawlerError
from .pip import PipRequirementsCrawler

logger = get_logger(__name__, component="crawler")

CRAWLERS: Dict[str, Type[BaseCrawler]] = {
    DockerfileCrawler.kind: DockerfileCrawler,
    PipRequirementsCrawler.kind: PipRequirementsCrawler,
}


def get_crawler(
    kind: str, spec: Optional[Dict[str, Any]], root_dir: Path, scm_id: str = ""
) -> BaseCrawler:
    """Instantiate the crawler registered under ``kind``.

    Args:
        kind: Crawler kind as written in the autodiscovery block
        spec: Crawler settings
        root_dir: Directory the crawler scans
        scm_id: SCM generated targets are attached to

    Returns:
        Instantiated crawler

    Raises:
        CrawlerConfigurationError: If the kind is unknown or the settings are invalid

    Example:
        >>> crawler = get_crawler("dockerfile", {"ignore": ["vendor/*"]}, Path("."))
        >>> manifests = crawler.discover()
    """
    crawler_class = CRAWLERS.get(kind.strip().lower())

    if not crawler_class:
        supported = ", ".join(sorted(CRAWLERS))
        raise CrawlerConfigurationError(
            f"Unknown crawler: {kind}. Supported crawlers: {supported}"
        )

    logger.debug(
        "Creating crawler instance",
        extra={"crawler": kind, "root_dir": str(root_dir), "crawler_class": crawler_class.__name__},
    )

    try:
        return crawler_class(spec, root_dir, scm_id=scm_id)
    except CrawlerError:
        raise
    except Exception as e:
        raise CrawlerConfigurationError(f"Failed to create {kind} crawler: {e}") from e
