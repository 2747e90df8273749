"""Custom exceptions for crawlers."""


class CrawlerError(Exception):
    """Base exception for all crawler errors.

    Any crawler error aborts the discovery pass that triggered it.
    """

    pass


class CrawlerConfigurationError(CrawlerError):
    """Invalid crawler configuration.

    Raised while building crawlers, e.g. for an unsupported crawler kind or a
    malformed ``ignore``/``only`` list.
    """

    pass


class CrawlerRunError(CrawlerError):
    """A crawler failed while scanning its directory.

    Attributes:
        crawler: Kind of the crawler that failed
    """

    def __init__(self, message: str, crawler: str = "") -> None:
        super().__init__(message)
        self.crawler = crawler
