"""Cell-name validity: a fixed syntax rule plus an injected policy."""

from __future__ import annotations

import re
from typing import Callable, Union

# Letter or underscore, then letters, digits or underscores.
_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

NamePolicy = Union[str, "re.Pattern[str]", Callable[[str], bool], None]


class NameValidator:
    """Accepts a name only if both the syntax rule and the policy accept it.

    *is_valid* may be a regular expression (source string or compiled
    pattern, matched anywhere in the name, so ``""`` accepts everything), a
    predicate, or ``None`` for no extra policy.
    """

    __slots__ = ("_pattern", "_predicate")

    def __init__(self, is_valid: NamePolicy = None) -> None:
        self._pattern: re.Pattern[str] | None = None
        if is_valid is None:
            self._pattern = re.compile("")
            self._predicate: Callable[[str], bool] = self._pattern.search  # type: ignore[assignment]
        elif isinstance(is_valid, str):
            self._pattern = re.compile(is_valid)
            self._predicate = self._pattern.search  # type: ignore[assignment]
        elif isinstance(is_valid, re.Pattern):
            self._pattern = is_valid
            self._predicate = is_valid.search  # type: ignore[assignment]
        elif callable(is_valid):
            self._predicate = is_valid
        else:
            raise TypeError(f"is_valid must be a regex or a callable, not {type(is_valid).__name__}")

    @property
    def pattern(self) -> str | None:
        """Source of the policy regex, or None for a predicate policy."""
        return self._pattern.pattern if self._pattern is not None else None

    def __call__(self, name: str) -> bool:
        if not isinstance(name, str) or not _NAME_RE.fullmatch(name):
            return False
        return bool(self._predicate(name))

    def __repr__(self) -> str:
        if self._pattern is not None:
            return f"NameValidator({self._pattern.pattern!r})"
        return f"NameValidator({self._predicate!r})"
