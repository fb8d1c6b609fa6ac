"""
Label filters - Predicates over classification labels (regions, security types)
"""

import re
from typing import Callable, Optional, Pattern, Union


class LabelFilter:
    """
    Decides whether a label (e.g. "Common Stock", "Europe") qualifies

    Build one with ``exact``, ``pattern`` or ``accept_all`` instead of calling
    the constructor directly.
    """

    def __init__(self, predicate: Callable[[str], bool], description: str, accept_missing: bool = False):
        self._predicate = predicate
        self.description = description
        self.accept_missing = accept_missing

    @classmethod
    def exact(cls, *labels: str) -> "LabelFilter":
        """Accept labels equal to one of ``labels`` (surrounding whitespace ignored)"""
        wanted = frozenset(label.strip() for label in labels)
        return cls(lambda label: label.strip() in wanted, f"exact({', '.join(sorted(wanted))})")

    @classmethod
    def pattern(cls, regex: Union[str, Pattern]) -> "LabelFilter":
        """Accept labels in which ``regex`` matches anywhere"""
        compiled = re.compile(regex) if isinstance(regex, str) else regex
        return cls(lambda label: compiled.search(label.strip()) is not None, f"pattern({compiled.pattern})")

    @classmethod
    def accept_all(cls) -> "LabelFilter":
        return cls(lambda label: True, "all", accept_missing=True)

    def __call__(self, label: Optional[str]) -> bool:
        if label is None:
            return self.accept_missing
        return self._predicate(label)

    def __repr__(self) -> str:
        return f"LabelFilter({self.description})"
