"""
Tests for timestamp normalization at the Report boundary.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from citypulse.models.report import Report, ReportLocation
from citypulse.utils.timestamps import normalize_timestamp

UTC = timezone.utc
EXPECTED = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


class FirestoreLikeTimestamp:
    def to_datetime(self):
        return datetime(2024, 1, 15, 10, 30)


class ProtobufLikeTimestamp:
    def ToDatetime(self):
        return datetime(2024, 1, 15, 10, 30)


class TestNormalizeTimestamp:

    @pytest.mark.parametrize("value", [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+00:00",
        "2024-01-15T16:00:00+05:30",
        "2024-01-15T10:30:00",
        "Mon, 15 Jan 2024 10:30:00 GMT",
    ])
    def test_strings(self, value):
        assert normalize_timestamp(value) == EXPECTED

    def test_naive_datetime_is_read_as_utc(self):
        result = normalize_timestamp(datetime(2024, 1, 15, 10, 30))
        assert result == EXPECTED
        assert result.tzinfo is not None

    def test_aware_datetime_is_converted_to_utc(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        result = normalize_timestamp(datetime(2024, 1, 15, 16, 0, tzinfo=ist))
        assert result == EXPECTED
        assert result.utcoffset() == timedelta(0)

    def test_date_is_midnight_utc(self):
        assert normalize_timestamp(date(2024, 1, 15)) == datetime(2024, 1, 15, tzinfo=UTC)

    def test_epoch_milliseconds(self):
        assert normalize_timestamp(EXPECTED.timestamp() * 1000) == EXPECTED
        assert normalize_timestamp(int(EXPECTED.timestamp() * 1000)) == EXPECTED

    @pytest.mark.parametrize("value", [
        {"seconds": int(EXPECTED.timestamp()), "nanoseconds": 0},
        {"_seconds": int(EXPECTED.timestamp()), "_nanoseconds": 0},
        {"seconds": int(EXPECTED.timestamp())},
    ])
    def test_seconds_wrappers(self, value):
        assert normalize_timestamp(value) == EXPECTED

    def test_nanoseconds_are_added(self):
        result = normalize_timestamp({"seconds": int(EXPECTED.timestamp()), "nanoseconds": 500_000_000})
        assert result == EXPECTED + timedelta(milliseconds=500)

    @pytest.mark.parametrize("value", [FirestoreLikeTimestamp(), ProtobufLikeTimestamp()])
    def test_timestamp_objects(self, value):
        assert normalize_timestamp(value) == EXPECTED

    @pytest.mark.parametrize("value", [
        None, "", "   ", "not a date", "2024-13-45", True, float("nan"), float("inf"),
        {"seconds": "soon"}, {"minutes": 5}, object(), [2024, 1, 15],
    ])
    def test_unparsable_values_return_none(self, value):
        assert normalize_timestamp(value) is None


class TestReportModel:

    def test_timestamp_is_normalized_on_construction(self):
        report = Report(id="1", description="x", timestamp="2024-01-15T10:30:00Z")
        assert report.timestamp == EXPECTED

    def test_malformed_timestamp_does_not_fail_validation(self):
        report = Report(id="1", description="x", timestamp="yesterday-ish")
        assert report.timestamp is None

    def test_upstream_camel_case_tag(self):
        report = Report.model_validate({"id": 7, "description": "x", "aiTag": "Power"})
        assert report.ai_tag == "Power"
        assert report.id == "7"

    def test_structured_location(self):
        report = Report.model_validate({"description": "x", "location": {"city": "Delhi", "area": "ITO"}})
        assert report.location == ReportLocation(city="Delhi", area="ITO")

    def test_non_string_tags_are_dropped(self):
        report = Report.model_validate({"description": None, "category": 42, "location": 12.5})
        assert report.category is None
        assert report.location is None
        assert report.description == ""

    def test_reports_are_immutable(self):
        report = Report(id="1", description="x")
        with pytest.raises(Exception):
            report.description = "changed"


class TestOutOfRangeTimestamps:

    @pytest.mark.parametrize("value", [
        10 ** 400,
        -(10 ** 400),
        {"seconds": 10 ** 400},
        {"seconds": 1, "nanoseconds": 10 ** 400},
        {"_seconds": 10 ** 20},
    ])
    def test_huge_numbers_return_none(self, value):
        assert normalize_timestamp(value) is None

    def test_report_with_huge_timestamp_is_kept_without_one(self):
        assert Report(id="1", description="x", timestamp=10 ** 400).timestamp is None

    def test_batch_survives_one_out_of_range_record(self):
        from citypulse.services.report_source import InMemoryReportSource

        source = InMemoryReportSource([
            {"id": "ok", "description": "Jam", "timestamp": "2024-01-15T10:30:00Z"},
            {"id": "huge", "description": "Jam", "timestamp": 10 ** 400},
        ])

        reports = source.fetch_reports()

        assert [r.id for r in reports] == ["ok", "huge"]
        assert reports[0].timestamp == EXPECTED
        assert reports[1].timestamp is None
