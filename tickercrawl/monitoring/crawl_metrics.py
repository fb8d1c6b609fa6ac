from dataclasses import dataclass


@dataclass
class CrawlMetrics:
    """Core crawling metrics"""
    tasks_submitted: int = 0
    tasks_dropped: int = 0
    pages_fetched: int = 0
    fetch_failures: int = 0
    classifier_failures: int = 0
    empty_pages: int = 0
    leaves_collected: int = 0
    duplicates_dropped: int = 0
    queue_depth: int = 0
    in_flight: int = 0
    peak_in_flight: int = 0
    pages_per_second: float = 0.0
    avg_response_time: float = 0.0
    bytes_downloaded: int = 0
