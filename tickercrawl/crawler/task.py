"""
Crawl Task - One scheduled fetch at a catalog location and stage
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Task:
    """A location to fetch, tagged with the stage whose rules apply to it"""
    location: str
    stage: Enum
    depth: int = 0

    def child(self, location: str, stage: Enum) -> "Task":
        """Create a task one level below this one"""
        return Task(location=location, stage=stage, depth=self.depth + 1)

    def sibling(self, location: str) -> "Task":
        """Create a task at the same stage and depth (used for pagination)"""
        return Task(location=location, stage=self.stage, depth=self.depth)
