"""
Report Sources - where the pipeline gets its reports from.

The aggregation core only needs ``fetch_reports() -> List[Report]``.
Sources are read-only; creating reports belongs to the reporting flow.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional
import logging

from pydantic import ValidationError

from citypulse.config.firebase import get_db
from citypulse.core.settings import settings
from citypulse.models.report import Report

logger = logging.getLogger(__name__)


class ReportSource(ABC):
    """Supplies a flat collection of reports."""

    @abstractmethod
    def fetch_reports(self) -> List[Report]:
        pass

    @abstractmethod
    def describe(self) -> Dict[str, Any]:
        """Short status dict for health checks."""
        pass


def parse_report(data: Dict[str, Any], report_id: Optional[str] = None) -> Optional[Report]:
    """Build a Report from a raw record; None (logged) if it fails validation."""
    if report_id is not None and "id" not in data:
        data = {**data, "id": report_id}
    try:
        return Report.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Skipping invalid report {report_id or data.get('id')}: {e.error_count()} validation error(s)")
        return None


class InMemoryReportSource(ReportSource):
    """List-backed source for local runs and tests."""

    def __init__(self, reports: Optional[Iterable[Any]] = None):
        self._reports: List[Report] = []
        for report in reports or []:
            if isinstance(report, Report):
                self._reports.append(report)
            else:
                parsed = parse_report(report)
                if parsed is not None:
                    self._reports.append(parsed)

    def fetch_reports(self) -> List[Report]:
        return list(self._reports)

    def describe(self) -> Dict[str, Any]:
        return {"source": "memory", "connected": True, "report_count": len(self._reports)}


class FirestoreReportSource(ReportSource):
    """Streams every document of the reports collection."""

    def __init__(self, collection: Optional[str] = None):
        self.collection = collection or settings.REPORTS_COLLECTION

    def fetch_reports(self) -> List[Report]:
        db = get_db()
        reports = []
        for doc in db.collection(self.collection).stream():
            data = doc.to_dict()
            if data is None:
                continue
            report = parse_report(data, doc.id)
            if report is not None:
                reports.append(report)
        logger.debug(f"Fetched {len(reports)} report(s) from Firestore collection '{self.collection}'")
        return reports

    def describe(self) -> Dict[str, Any]:
        db = get_db()
        # Lightweight connectivity check; does not read documents
        collections = list(db.collections())
        return {
            "source": "firestore",
            "connected": True,
            "collection": self.collection,
            "collections_count": len(collections),
        }


# Global source instance (singleton)
_report_source: Optional[ReportSource] = None


def get_report_source() -> ReportSource:
    """Report source selected by REPORT_SOURCE."""
    global _report_source
    if _report_source is None:
        if settings.REPORT_SOURCE.lower() == "firestore":
            _report_source = FirestoreReportSource()
            logger.info(f"✅ Report source: Firestore ({settings.REPORTS_COLLECTION})")
        else:
            _report_source = InMemoryReportSource()
            logger.info("✅ Report source: in-memory")
    return _report_source


def set_report_source(source: Optional[ReportSource]) -> None:
    """Replace the process-wide source (None resets to settings on next use)."""
    global _report_source
    _report_source = source
