"""Typed case-status record assembled from one result fragment."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

RECORD_NOT_FOUND_STATUS = "Record Not Found"
RECORD_NOT_FOUND_MESSAGE = "The website returned no records for this CNR."


@dataclass(frozen=True)
class LowerCourtEntry:
    serial: str
    case_no: str
    court_name: str
    order_date: str


@dataclass(frozen=True)
class ApplicationEntry:
    ia_no: str
    prayer: str
    filing_date: str
    party: str


@dataclass(frozen=True)
class ConnectedMatter:
    case_no: str
    stage: str


@dataclass(frozen=True)
class HearingEntry:
    judge: str
    item_no: str
    business_date: str
    business: str
    hearing_date: str
    purpose: str
    adjournment: str


# History rows the portal renders as header/value pairs instead of seven
# positional cells are kept as read-only open mappings.
HistoryEntry = Union[HearingEntry, Mapping[str, str]]


@dataclass(frozen=True)
class CaveatEntry:
    serial: str
    filing_no: str
    caveat_no: str
    petitioner: str
    respondent: str
    counsel: str
    filing_date: str


@dataclass(frozen=True)
class OrderLink:
    text: str
    href: str


@dataclass(frozen=True)
class OrderEntry:
    serial: str
    case_details: str
    petitioner: str
    respondent: str
    order_date: str
    judge: str
    order_copy_links: Tuple[OrderLink, ...] = ()


@dataclass(frozen=True)
class CaseRecord:
    basic_info: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    petitioner_details: str = ""
    respondent_details: str = ""
    petitioner_counsel: str = ""
    respondent_counsel: str = ""
    main_prayer: str = ""
    lower_court_details: Tuple[LowerCourtEntry, ...] = ()
    applications: Tuple[ApplicationEntry, ...] = ()
    connected_matters: Tuple[ConnectedMatter, ...] = ()
    case_history: Tuple[HistoryEntry, ...] = ()
    caveat_details: Tuple[CaveatEntry, ...] = ()
    orders: Tuple[OrderEntry, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready copy: plain dicts and lists all the way down."""

        return _plain(self)


def _plain(value: Any) -> Any:
    # Read-only mappings cannot go through dataclasses.asdict, which deep-copies.
    if is_dataclass(value):
        return {item.name: _plain(getattr(value, item.name)) for item in fields(value)}
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


@dataclass(frozen=True)
class ScrapeResult:
    """Successful outcome of one CNR lookup.

    ``record`` is ``None`` when the portal reported that no case matches the
    CNR. ``html`` is the raw result fragment the outcome was derived from.
    """

    cnr: str
    html: str
    record: Optional[CaseRecord] = None

    @property
    def not_found(self) -> bool:
        return self.record is None

    def data(self) -> Dict[str, Any]:
        if self.record is None:
            return {"status": RECORD_NOT_FOUND_STATUS, "message": RECORD_NOT_FOUND_MESSAGE}
        return self.record.to_dict()


__all__ = [
    "ApplicationEntry",
    "CaseRecord",
    "CaveatEntry",
    "ConnectedMatter",
    "HearingEntry",
    "HistoryEntry",
    "LowerCourtEntry",
    "OrderEntry",
    "OrderLink",
    "RECORD_NOT_FOUND_MESSAGE",
    "RECORD_NOT_FOUND_STATUS",
    "ScrapeResult",
]
