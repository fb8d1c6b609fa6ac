from dataclasses import dataclass


@dataclass
class SystemMetrics:
    """System resource metrics of the crawling process"""
    cpu_percent: float = 0.0
    memory_used_mb: float = 0.0
    open_files: int = 0
