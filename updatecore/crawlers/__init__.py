"""Crawlers that scan a workspace and emit candidate update manifests.

Use the runner to execute every crawler of an autodiscovery block:
    from updatecore.crawlers import CrawlerRunner
    manifests = CrawlerRunner(spec, working_dir).run()

Or build a single crawler:
    from updatecore.crawlers import get_crawler
    crawler = get_crawler("dockerfile", {}, Path("."))
"""

from .base import BaseCrawler
from .dockerfile import DockerfileCrawler
from .exceptions import CrawlerConfigurationError, CrawlerError, CrawlerRunError
from .factory import CRAWLERS, get_crawler
from .pip import PipRequirementsCrawler
from .runner import DEFAULT_CRAWLER_SPECS, CrawlerRunner

__all__ = [
    # Base, factory and runner
    "BaseCrawler",
    "get_crawler",
    "CRAWLERS",
    "CrawlerRunner",
    "DEFAULT_CRAWLER_SPECS",
    # Crawlers
    "DockerfileCrawler",
    "PipRequirementsCrawler",
    # Exceptions
    "CrawlerError",
    "CrawlerConfigurationError",
    "CrawlerRunError",
]
