"""Label <-> identifier translation over portal option lists.

Lookups return a tagged outcome instead of a nullable value so each call site
decides what an ambiguous or missing match means for it (fail, keep the raw
value, or fall back to a sentinel).
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Sequence, Tuple, TypeVar, Union

from ..core.exceptions import InvalidValue

if TYPE_CHECKING:
    from ..services.portal.models import OptionEntry

T = TypeVar("T")


@dataclass(frozen=True)
class Found:
    """Exactly one option matched."""

    value: str

    def is_found(self) -> bool:
        """Check if the lookup matched exactly one option."""
        return True

    def unwrap(self) -> str:
        """Get the matched value."""
        return self.value

    def unwrap_or(self, default: Any) -> str:
        """Get the matched value (the default is ignored)."""
        return self.value

    def __repr__(self) -> str:
        """String representation."""
        return f"Found({self.value!r})"


@dataclass(frozen=True)
class Ambiguous:
    """More than one option matched."""

    query: str
    matches: Tuple[str, ...]

    def is_found(self) -> bool:
        """Check if the lookup matched exactly one option."""
        return False

    def unwrap(self) -> Any:
        """
        Attempt to get value.

        Raises:
            InvalidValue: Always, the query matched several options
        """
        raise InvalidValue(
            "label", self.query, f"matches {len(self.matches)} options: {', '.join(self.matches)}"
        )

    def unwrap_or(self, default: T) -> T:
        """Return the default value."""
        return default

    def __repr__(self) -> str:
        """String representation."""
        return f"Ambiguous({self.query!r}, matches={list(self.matches)!r})"


@dataclass(frozen=True)
class NotFound:
    """No option matched."""

    query: str

    def is_found(self) -> bool:
        """Check if the lookup matched exactly one option."""
        return False

    def unwrap(self) -> Any:
        """
        Attempt to get value.

        Raises:
            InvalidValue: Always, the query matched nothing
        """
        raise InvalidValue("label", self.query, "does not match any option")

    def unwrap_or(self, default: T) -> T:
        """Return the default value."""
        return default

    def __repr__(self) -> str:
        """String representation."""
        return f"NotFound({self.query!r})"


LabelMatch = Union[Found, Ambiguous, NotFound]


def _outcome(query: str, matches: Sequence[str]) -> LabelMatch:
    if len(matches) == 1:
        return Found(matches[0])
    if not matches:
        return NotFound(query)
    return Ambiguous(query, tuple(matches))


def id_from_label(
    options: Sequence["OptionEntry"], label: str, exact: bool = False
) -> LabelMatch:
    """
    Find the id of the option whose label matches.

    By default the label is matched as a case-insensitive substring of each
    option label; ``exact`` switches to case-sensitive equality. Only a single
    match counts as found.

    Args:
        options: Ordered option list
        label: Label (or label fragment) to look for
        exact: Require exact, case-sensitive equality

    Returns:
        Found(id), Ambiguous or NotFound
    """
    if exact:
        matches = [option.id for option in options if option.label == label]
    else:
        needle = label.lower()
        matches = [option.id for option in options if needle in option.label.lower()]
    return _outcome(label, matches)


def label_from_id(options: Sequence["OptionEntry"], option_id: str) -> LabelMatch:
    """
    Find the label of the option with the given id.

    Args:
        options: Ordered option list
        option_id: Portal identifier

    Returns:
        Found(label), NotFound, or Ambiguous if the list repeats an id
    """
    matches = [option.label for option in options if option.id == option_id]
    return _outcome(option_id, matches)
