"""Pagination helpers for metric listings.

``PaginationParams`` clamps page / size to sane bounds and
``PaginatedResponse.from_sequence`` slices an already-ordered sequence.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

_DEFAULT_PAGE: int = 1
_DEFAULT_SIZE: int = 50
_MAX_SIZE: int = 500


@dataclass(frozen=True)
class PaginationParams:
    """``page`` is 1-based; ``size`` is clamped to [1, 500]."""

    page: int = _DEFAULT_PAGE
    size: int = _DEFAULT_SIZE

    def __post_init__(self) -> None:
        # frozen=True requires object.__setattr__ for validation fixups
        object.__setattr__(self, "page", max(1, self.page))
        object.__setattr__(self, "size", max(1, min(self.size, _MAX_SIZE)))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


@dataclass
class PaginatedResponse(Generic[T]):
    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = _DEFAULT_PAGE
    size: int = _DEFAULT_SIZE

    @classmethod
    def from_sequence(cls, items: Sequence[T], params: PaginationParams) -> PaginatedResponse[T]:
        window = list(items[params.offset : params.offset + params.size])
        return cls(items=window, total=len(items), page=params.page, size=params.size)

    @property
    def pages(self) -> int:
        if self.total == 0:
            return 1
        return math.ceil(self.total / self.size)

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1
