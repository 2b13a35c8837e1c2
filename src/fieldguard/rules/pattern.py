"""Pattern rule and the process-wide compiled-pattern cache."""

import logging
import re
import threading

from ..errors import Error

logger = logging.getLogger(__name__)


class PatternCache:
    """Compiles each pattern text at most once and shares the result.

    Lookups of an already compiled pattern take no lock. The first lookup of
    a text compiles it under the lock; concurrent first lookups of the same
    text wait for that compilation instead of repeating it.
    """

    def __init__(self):
        self._patterns: dict[str, re.Pattern] = {}
        self._lock = threading.Lock()
        self.compilations = 0

    def get(self, text: str) -> re.Pattern:
        pattern = self._patterns.get(text)
        if pattern is not None:
            return pattern
        with self._lock:
            pattern = self._patterns.get(text)
            if pattern is None:
                logger.debug(f"Compiling pattern /{text}/")
                pattern = re.compile(text)
                self.compilations += 1
                self._patterns[text] = pattern
        return pattern

    def __contains__(self, text: str) -> bool:
        return text in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)


PATTERNS = PatternCache()


def apply(value: str, args: tuple) -> None:
    (text,) = args
    if PATTERNS.get(text).search(value) is None:
        raise Error(f"does not match pattern /{text}/")
