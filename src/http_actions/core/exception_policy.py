"""Exception policy: mapping raised exceptions to statuses or handlers.

A policy is an ordered, immutable table of ``exception class -> target``
entries. The target is either a status code or the name of a recovery
method on the action.

When several registered classes match a raised exception, the most
specific one wins: the class that appears earliest in the exception's
method resolution order. Classes matched only through ``isinstance``
hooks (abstract base classes) rank after every class in the MRO. Remaining
ties go to the entry declared first.

Policies merge in two levels. An application-wide policy provides the base
entries and an action-level policy overrides them: overriding an existing
class keeps its position, new classes are appended.

Examples:
    >>> policy = ExceptionPolicy({Exception: 500, LookupError: 404})
    >>> policy.resolve(KeyError("id"))
    404
    >>> policy.resolve(RuntimeError("boom"))
    500
    >>> policy.resolve(KeyboardInterrupt()) is None
    True
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

PolicyTarget = int | str


def _validate_kind(kind: Any) -> type[BaseException]:
    if not (isinstance(kind, type) and issubclass(kind, BaseException)):
        raise TypeError(f"Exception policy keys must be exception classes, got {kind!r}")
    return kind


class ExceptionPolicy:
    """Ordered exception class to status/handler table."""

    __slots__ = ("_entries",)

    def __init__(
        self,
        entries: Mapping[type[BaseException], PolicyTarget]
        | Iterable[tuple[type[BaseException], PolicyTarget]] = (),
    ) -> None:
        if isinstance(entries, Mapping):
            entries = entries.items()
        table: dict[type[BaseException], PolicyTarget] = {}
        for kind, target in entries:
            table[_validate_kind(kind)] = target
        self._entries = tuple(table.items())

    def handle(
        self, mapping: Mapping[type[BaseException], PolicyTarget]
    ) -> "ExceptionPolicy":
        """Return a new policy with ``mapping`` layered on top of this one.

        Example:
            >>> ExceptionPolicy({ValueError: 400}).handle({ValueError: 422}).resolve(ValueError())
            422
        """
        table = dict(self._entries)
        table.update(mapping)
        return ExceptionPolicy(table)

    def merged_over(self, base: "ExceptionPolicy | Mapping[type[BaseException], PolicyTarget]") -> "ExceptionPolicy":
        """Return ``base`` overridden by this policy's entries."""
        if not isinstance(base, ExceptionPolicy):
            base = ExceptionPolicy(base)
        return base.handle(dict(self._entries))

    def resolve(self, exception: BaseException) -> PolicyTarget | None:
        """Return the target for the most specific matching entry.

        Args:
            exception: The raised exception.

        Returns:
            The status code or handler name, or None when nothing matches.
        """
        mro = type(exception).__mro__
        best: tuple[int, int] | None = None
        resolved: PolicyTarget | None = None

        for position, (kind, target) in enumerate(self._entries):
            if not isinstance(exception, kind):
                continue
            rank = (mro.index(kind) if kind in mro else len(mro), position)
            if best is None or rank < best:
                best = rank
                resolved = target

        return resolved

    def __iter__(self) -> Iterator[tuple[type[BaseException], PolicyTarget]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, kind: object) -> bool:
        return any(registered is kind for registered, _ in self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExceptionPolicy):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        body = ", ".join(f"{kind.__name__}: {target!r}" for kind, target in self._entries)
        return f"ExceptionPolicy({{{body}}})"
