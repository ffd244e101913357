from __future__ import annotations


class DomainError(Exception):
    """Base class for all domain-layer exceptions.

    Carries HTTP-mapping metadata so an outer presentation layer can produce
    RFC 9457 Problem Details without knowing exception internals.
    """

    def __init__(
        self,
        detail: str = "",
        *,
        title: str = "Domain Error",
        status_code: int = 400,
        error_type: str = "about:blank",
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.title = title
        self.status_code = status_code
        self.error_type = error_type


class InsufficientDataError(DomainError):
    def __init__(self, metric_type: str = "", required: int = 0, actual: int = 0) -> None:
        self.metric_type = metric_type
        self.required = required
        self.actual = actual
        super().__init__(
            detail=(
                f"Insufficient data for {metric_type or 'analysis'}: "
                f"{actual} points available, at least {required} required"
            ),
            title="Insufficient Data",
            status_code=422,
            error_type="https://api.ops-analytics.example/problems/insufficient-data",
        )


class AnomalyNotFoundError(DomainError):
    def __init__(self, anomaly_id: str = "") -> None:
        self.anomaly_id = anomaly_id
        super().__init__(
            detail=f"Anomaly not found: {anomaly_id}",
            title="Anomaly Not Found",
            status_code=404,
            error_type="https://api.ops-analytics.example/problems/anomaly-not-found",
        )


class InvalidHorizonError(DomainError):
    def __init__(self, hours_ahead: int = 0, minimum: int = 1, maximum: int = 168) -> None:
        self.hours_ahead = hours_ahead
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            detail=f"hours_ahead must be between {minimum} and {maximum}, got {hours_ahead}",
            title="Invalid Forecast Horizon",
            status_code=400,
            error_type="https://api.ops-analytics.example/problems/invalid-horizon",
        )


class DegenerateInputError(DomainError):
    def __init__(self, reason: str = "") -> None:
        self.reason = reason
        super().__init__(
            detail=f"Degenerate input: {reason}",
            title="Degenerate Input",
            status_code=422,
            error_type="https://api.ops-analytics.example/problems/degenerate-input",
        )


class DuplicateAnomalyError(DomainError):
    def __init__(self, dedup_key: str = "") -> None:
        self.dedup_key = dedup_key
        super().__init__(
            detail=f"An unresolved anomaly already exists for key {dedup_key}",
            title="Duplicate Anomaly",
            status_code=409,
            error_type="https://api.ops-analytics.example/problems/duplicate-anomaly",
        )
