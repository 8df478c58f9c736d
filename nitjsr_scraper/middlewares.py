from urllib.parse import urlparse

from twisted.internet.error import DNSLookupError, TimeoutError as TwistedTimeoutError


class NitjsrErrorMiddleware:
    """
    Log downloader errors (DNS, timeouts, etc.) with their type, then let them
    travel on to the request errback, which records them and continues the crawl.
    """

    @classmethod
    def from_crawler(cls, crawler):
        return cls()

    def process_exception(self, request, exception, spider):
        log_details = {
            "url": request.url,
            "spider_name": spider.name,
            "middleware_class": self.__class__.__name__,
            "error": str(exception),
            "exception_type": type(exception).__name__,
            "domain": urlparse(request.url).netloc,
        }

        if isinstance(exception, DNSLookupError):
            log_details["event_type"] = "dns_error"
            spider.logger.warning("DNS lookup failed for request", extra=log_details)
        elif isinstance(exception, TwistedTimeoutError):
            log_details["event_type"] = "download_timeout"
            spider.logger.warning("Page download timed out", extra=log_details)
        else:
            log_details["event_type"] = "downloader_exception_general"
            spider.logger.error("Unhandled downloader exception", extra=log_details)

        return None
