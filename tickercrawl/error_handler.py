import asyncio
import time
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Dict, List, Optional, Any
from collections import defaultdict
import aiohttp

logger = logging.getLogger(__name__)


class CrawlError(Exception):
    """Base class for errors surfaced to the caller of a crawl"""


class ConfigurationError(CrawlError):
    """The crawl is misconfigured; raised before any fetch is issued"""


class ErrorType(Enum):
    """Classification of different error types"""
    NETWORK_TIMEOUT = "network_timeout"
    CONNECTION_ERROR = "connection_error"
    HTTP_CLIENT_ERROR = "http_client_error"  # 4xx
    HTTP_SERVER_ERROR = "http_server_error"  # 5xx
    PARSING_ERROR = "parsing_error"
    CLASSIFIER_ERROR = "classifier_error"
    UNKNOWN_ERROR = "unknown_error"


TRANSPORT_ERRORS = frozenset([
    ErrorType.NETWORK_TIMEOUT,
    ErrorType.CONNECTION_ERROR,
    ErrorType.HTTP_CLIENT_ERROR,
    ErrorType.HTTP_SERVER_ERROR,
    ErrorType.UNKNOWN_ERROR,
])


@dataclass
class ErrorInfo:
    """Information about an error occurrence"""
    url: str
    error_type: ErrorType
    status_code: Optional[int]
    message: str
    timestamp: float
    response_time: Optional[float] = None


def classify_error(error: Optional[BaseException] = None, status_code: Optional[int] = None) -> ErrorType:
    """Classify an exception or HTTP status into an error type"""
    if isinstance(error, asyncio.TimeoutError):
        return ErrorType.NETWORK_TIMEOUT
    elif isinstance(error, (aiohttp.ClientConnectionError, OSError)):
        return ErrorType.CONNECTION_ERROR
    elif status_code:
        if 400 <= status_code < 500:
            return ErrorType.HTTP_CLIENT_ERROR
        elif 500 <= status_code < 600:
            return ErrorType.HTTP_SERVER_ERROR

    return ErrorType.UNKNOWN_ERROR


class ErrorHandler:
    """
    Records failed tasks of a crawl

    Failures never stop a crawl and are never retried; the handler only keeps
    the history so callers can tell an empty catalog from a failing one.
    """

    def __init__(self):
        self.error_history: List[ErrorInfo] = []
        self.failed_urls: Dict[str, List[ErrorInfo]] = defaultdict(list)

    def record(self, url: str, error_type: ErrorType, message: str,
               status_code: Optional[int] = None, response_time: Optional[float] = None) -> ErrorInfo:
        """Record one failure and log it"""
        error_info = ErrorInfo(
            url=url,
            error_type=error_type,
            status_code=status_code,
            message=message,
            timestamp=time.time(),
            response_time=response_time
        )

        self.error_history.append(error_info)
        self.failed_urls[url].append(error_info)

        if error_type in TRANSPORT_ERRORS:
            logger.warning(f"Fetch failed for {url}: {error_type.value} - {message}")
        else:
            logger.error(f"Could not process {url}: {error_type.value} - {message}")

        return error_info

    def count(self, *error_types: ErrorType) -> int:
        """Number of recorded errors, optionally restricted to some types"""
        if not error_types:
            return len(self.error_history)
        return sum(1 for e in self.error_history if e.error_type in error_types)

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors encountered"""
        if not self.error_history:
            return {"total_errors": 0}

        error_counts = defaultdict(int)
        domain_errors = defaultdict(int)

        for error in self.error_history:
            error_counts[error.error_type.value] += 1
            domain = error.url.split("//")[1].split("/")[0] if "//" in error.url else "unknown"
            domain_errors[domain] += 1

        return {
            "total_errors": len(self.error_history),
            "failed_urls": len(self.failed_urls),
            "error_types": dict(error_counts),
            "domain_errors": dict(domain_errors),
        }

    def get_failed_urls(self) -> List[str]:
        """Get list of URLs that failed"""
        return list(self.failed_urls.keys())
