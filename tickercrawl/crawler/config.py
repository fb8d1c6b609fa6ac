"""
Crawl Configuration - Immutable settings for a crawl run
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

from ..error_handler import ConfigurationError
from ..filters import LabelFilter
from .aggregator import identity
from .pagination import Pager
from .result import PageOutcome
from .task import Task

# (parsed page, effective location, label filter) -> outcome
Classifier = Callable[[object, str, LabelFilter], PageOutcome]


@dataclass(frozen=True)
class StageRule:
    """How pages of one stage are classified and paginated"""
    classifier: Classifier
    pager: Optional[Pager] = None


@dataclass(frozen=True)
class CrawlConfig:
    """Configuration for a crawl; shared by every run of a crawler"""
    stages: Mapping[Enum, StageRule]
    seed_to_tasks: Callable[[str], Iterable[Task]]
    dedup_key: Callable[[str], str] = identity
    label_filter: LabelFilter = field(default_factory=LabelFilter.accept_all)
    max_concurrent: int = 100
    timeout: float = 30.0
    follow_redirects: bool = True
    max_tasks: Optional[int] = None
    progress_interval: Optional[float] = 30.0

    def __post_init__(self):
        if not self.stages:
            raise ConfigurationError("At least one stage rule is required")
        if self.seed_to_tasks is None:
            raise ConfigurationError("A seed to task mapping is required")
        if self.max_concurrent < 1:
            raise ConfigurationError(f"max_concurrent must be positive, got {self.max_concurrent}")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        if self.max_tasks is not None and self.max_tasks < 1:
            raise ConfigurationError(f"max_tasks must be positive, got {self.max_tasks}")

        for stage in self.stages:
            if not isinstance(stage, Enum):
                raise ConfigurationError(f"Stages must be Enum members, got {stage!r}")

        # Every member of each stage enumeration needs a rule
        for enum_cls in {type(stage) for stage in self.stages}:
            missing = [member.name for member in enum_cls if member not in self.stages]
            if missing:
                raise ConfigurationError(f"No rule for {enum_cls.__name__} stages: {', '.join(missing)}")

        object.__setattr__(self, 'stages', MappingProxyType(dict(self.stages)))

    def rule_for(self, stage: Enum) -> StageRule:
        try:
            return self.stages[stage]
        except KeyError:
            raise ConfigurationError(f"No rule configured for stage {stage!r}") from None
