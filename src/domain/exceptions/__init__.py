from domain.exceptions.analytics_exceptions import (
    AnomalyNotFoundError,
    DegenerateInputError,
    DomainError,
    DuplicateAnomalyError,
    InsufficientDataError,
    InvalidHorizonError,
)

__all__ = [
    "AnomalyNotFoundError",
    "DegenerateInputError",
    "DomainError",
    "DuplicateAnomalyError",
    "InsufficientDataError",
    "InvalidHorizonError",
]
