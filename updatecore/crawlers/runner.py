"""Run every crawler configured in an autodiscovery block."""

from pathlib import Path
from typing import List, Union

from updatecore.config.models import AutoDiscoverySpec
from updatecore.logging import get_logger
from updatecore.logging.context import log_context

from .base import BaseCrawler
from .dockerfile import DockerfileCrawler
from .exceptions import CrawlerError, CrawlerRunError
from .factory import get_crawler
from .pip import PipRequirementsCrawler

logger = get_logger(__name__, component="crawler")

# Crawlers enabled by the implicit "Local AutoDiscovery" pipeline
DEFAULT_CRAWLER_SPECS = AutoDiscoverySpec(
    crawlers={DockerfileCrawler.kind: {}, PipRequirementsCrawler.kind: {}}
)


class CrawlerRunner:
    """Runs the crawlers of one autodiscovery block against one directory.

    Construction builds every crawler, so an unknown kind or invalid setting
    fails before anything is scanned. ``run()`` is all-or-nothing: the first
    crawler failure aborts the whole run.
    """

    def __init__(self, spec: AutoDiscoverySpec, working_dir: Union[str, Path]):
        """
        Args:
            spec: Autodiscovery block of the parent pipeline
            working_dir: Directory to scan

        Raises:
            CrawlerConfigurationError: If a crawler cannot be built
        """
        self.spec = spec
        self.working_dir = Path(working_dir)
        self.crawlers: List[BaseCrawler] = [
            get_crawler(kind, crawler_spec, self.working_dir, scm_id=spec.scm_id)
            for kind, crawler_spec in (spec.crawlers or {}).items()
        ]

    def run(self) -> List[bytes]:
        """Run crawlers in declaration order and concatenate their manifests.

        Raises:
            CrawlerRunError: If any crawler fails
        """
        manifests: List[bytes] = []

        for crawler in self.crawlers:
            with log_context(crawler=crawler.kind):
                try:
                    found = crawler.discover()
                except CrawlerError:
                    raise
                except Exception as e:
                    raise CrawlerRunError(
                        f"{crawler.kind} crawler failed in {self.working_dir}: {e}",
                        crawler=crawler.kind,
                    ) from e

                logger.info(
                    f"{crawler.kind} crawler found {len(found)} manifest(s)",
                    extra={
                        "event": "discovery.crawler.completed",
                        "count": len(found),
                        "working_dir": str(self.working_dir),
                    },
                )
                manifests.extend(found)

        return manifests
