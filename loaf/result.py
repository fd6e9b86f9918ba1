from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a pipeline operation.

    When ``succeeded`` is False the payload is an empty default and carries no
    meaning. ``cancelled`` marks an operation that was abandoned because its
    token fired; such results are always unsuccessful.
    """

    payload: T
    succeeded: bool
    cancelled: bool = False

    def __iter__(self):
        # Allows ``succeeded, payload = result``
        yield self.succeeded
        yield self.payload
