"""Tests for src/domain/exceptions/analytics_exceptions.py"""

import pytest

from domain.exceptions import (
    AnomalyNotFoundError,
    DegenerateInputError,
    DomainError,
    DuplicateAnomalyError,
    InsufficientDataError,
    InvalidHorizonError,
)


class TestDomainError:
    def test_default_attributes(self):
        exc = DomainError("something went wrong")
        assert exc.detail == "something went wrong"
        assert exc.title == "Domain Error"
        assert exc.status_code == 400
        assert exc.error_type == "about:blank"

    def test_custom_attributes(self):
        exc = DomainError("custom", title="Custom", status_code=422, error_type="urn:custom")
        assert exc.title == "Custom"
        assert exc.status_code == 422
        assert exc.error_type == "urn:custom"

    def test_str_is_detail(self):
        assert str(DomainError("boom")) == "boom"


class TestInsufficientDataError:
    def test_attributes(self):
        exc = InsufficientDataError("trend of ResponseTime", required=10, actual=4)
        assert exc.required == 10
        assert exc.actual == 4
        assert exc.status_code == 422
        assert "4 points available, at least 10 required" in exc.detail


class TestAnomalyNotFoundError:
    def test_attributes(self):
        exc = AnomalyNotFoundError("abc")
        assert exc.anomaly_id == "abc"
        assert exc.status_code == 404
        assert "abc" in exc.detail


class TestInvalidHorizonError:
    def test_attributes(self):
        exc = InvalidHorizonError(169)
        assert (exc.hours_ahead, exc.minimum, exc.maximum) == (169, 1, 168)
        assert exc.status_code == 400
        assert exc.detail == "hours_ahead must be between 1 and 168, got 169"


class TestDegenerateInputError:
    def test_attributes(self):
        exc = DegenerateInputError("all x values are equal")
        assert exc.reason == "all x values are equal"
        assert exc.status_code == 422


class TestDuplicateAnomalyError:
    def test_attributes(self):
        exc = DuplicateAnomalyError("CPUUsage@2026-02-17T10:30:00+00:00")
        assert exc.dedup_key.startswith("CPUUsage@")
        assert exc.status_code == 409


@pytest.mark.parametrize(
    "exc_cls",
    [
        InsufficientDataError,
        AnomalyNotFoundError,
        InvalidHorizonError,
        DegenerateInputError,
        DuplicateAnomalyError,
    ],
)
def test_all_derive_from_domain_error(exc_cls):
    assert issubclass(exc_cls, DomainError)
    assert exc_cls().error_type.startswith("https://")
