"""Turn the portal's case-status result fragment into a :class:`CaseRecord`."""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Protocol, TypeVar

from bs4 import BeautifulSoup
from bs4.element import Tag

from .models import (
    ApplicationEntry,
    CaseRecord,
    CaveatEntry,
    ConnectedMatter,
    HearingEntry,
    HistoryEntry,
    LowerCourtEntry,
    OrderEntry,
    OrderLink,
)
from .utils import clean_text, normalize_key

BASIC_INFO_TABLE = ".table_caseno_search"

LOWER_COURT_TITLE = "Lower Court Details"
APPLICATIONS_TITLE = "Applications Details"
CONNECTED_MATTERS_TITLE = "Connected Matters"
CASE_HISTORY_TITLE = "History of Case Hearing"
CAVEAT_TITLE = "Caveat Details"
ORDERS_TITLE = "Orders"

_BOLD_STYLE = re.compile(r"font-weight\s*:\s*bold", re.IGNORECASE)

T = TypeVar("T")


class SectionLocator(Protocol):
    """Finds the table holding a named section of the result fragment."""

    def locate(self, soup: BeautifulSoup, title: str) -> Optional[Tag]:
        ...


class HeadingSectionLocator:
    """Section tables sit directly after a heading that carries their title."""

    def __init__(self, heading_tag: str = "h4") -> None:
        self.heading_tag = heading_tag

    def locate(self, soup: BeautifulSoup, title: str) -> Optional[Tag]:
        for heading in soup.find_all(self.heading_tag):
            if title not in heading.get_text():
                continue
            sibling = heading.find_next_sibling()
            if sibling is not None and sibling.name == "table":
                return sibling
        return None


def _adjacent_value(cell: Tag) -> Optional[Tag]:
    """Return the element right after ``cell`` when it is a ``td``."""

    sibling = cell.find_next_sibling()
    if sibling is not None and sibling.name == "td":
        return sibling
    return None


def _keyed_pairs(row: Tag) -> Mapping[str, str]:
    pairs: Dict[str, str] = {}
    for header in row.find_all("th"):
        key = normalize_key(clean_text(header.get_text()))
        value_cell = _adjacent_value(header)
        if key:
            pairs[key] = clean_text(value_cell.get_text()) if value_cell is not None else ""
    return MappingProxyType(pairs)


def _cell_texts(row: Tag) -> List[str]:
    return [clean_text(cell.get_text()) for cell in row.find_all("td")]


class CaseStatusExtractor:
    def __init__(self, locator: Optional[SectionLocator] = None) -> None:
        self.locator: SectionLocator = locator or HeadingSectionLocator()

    def extract(self, html: str) -> CaseRecord:
        soup = BeautifulSoup(html or "", "html5lib")
        return CaseRecord(
            basic_info=self._basic_info(soup),
            petitioner_details=self._text_by_label(soup, "Petitioner Details"),
            respondent_details=self._text_by_label(soup, "Respondent Details"),
            petitioner_counsel=self._text_by_label(soup, "Petitioner Counsel"),
            respondent_counsel=self._text_by_label(soup, "Respondent Counsel"),
            main_prayer=self._text_by_label(soup, "Prayer"),
            lower_court_details=self._section(soup, LOWER_COURT_TITLE, _lower_court_row),
            applications=self._section(soup, APPLICATIONS_TITLE, _application_row),
            connected_matters=self._section(soup, CONNECTED_MATTERS_TITLE, _connected_row),
            case_history=self._section(soup, CASE_HISTORY_TITLE, _history_row),
            caveat_details=self._section(soup, CAVEAT_TITLE, _caveat_row),
            orders=self._section(soup, ORDERS_TITLE, _order_row),
        )

    def _basic_info(self, soup: BeautifulSoup) -> Mapping[str, str]:
        details: Dict[str, str] = {}
        for row in soup.select(f"{BASIC_INFO_TABLE} tr"):
            for header in row.find_all("th"):
                key = normalize_key(clean_text(header.get_text()))
                value_cell = _adjacent_value(header)
                value = clean_text(value_cell.get_text()) if value_cell is not None else ""
                if key and value:
                    details[key] = value
        return MappingProxyType(details)

    def _text_by_label(self, soup: BeautifulSoup, label: str) -> str:
        for header in soup.find_all("th"):
            if label not in header.get_text():
                continue
            value_cell = _adjacent_value(header)
            return clean_text(value_cell.get_text()) if value_cell is not None else ""
        return ""

    def _section(
        self,
        soup: BeautifulSoup,
        title: str,
        parse_row: Callable[[Tag], Optional[T]],
    ) -> tuple[T, ...]:
        table = self.locator.locate(soup, title)
        if table is None:
            return ()
        entries = []
        for row in table.select("tbody tr"):
            entry = parse_row(row)
            if entry is not None:
                entries.append(entry)
        return tuple(entries)


def _lower_court_row(row: Tag) -> Optional[LowerCourtEntry]:
    if row.find("th") is not None:
        return None
    cells = _cell_texts(row)
    if len(cells) < 4:
        return None
    return LowerCourtEntry(
        serial=cells[0], case_no=cells[1], court_name=cells[2], order_date=cells[3]
    )


def _application_row(row: Tag) -> Optional[ApplicationEntry]:
    # Bold rows are sub-headings inside the applications table.
    if _BOLD_STYLE.search(row.get("style") or ""):
        return None
    cells = _cell_texts(row)
    if len(cells) < 4:
        return None
    return ApplicationEntry(
        ia_no=cells[0], prayer=cells[1], filing_date=cells[2], party=cells[3]
    )


def _connected_row(row: Tag) -> Optional[ConnectedMatter]:
    if "no records" in clean_text(row.get_text()).lower():
        return None
    cells = _cell_texts(row)
    if len(cells) < 2:
        return None
    return ConnectedMatter(case_no=cells[0], stage=cells[1])


def _history_row(row: Tag) -> Optional[HistoryEntry]:
    cells = _cell_texts(row)
    if len(cells) >= 7:
        return HearingEntry(
            judge=cells[0],
            item_no=cells[1],
            business_date=cells[2],
            business=cells[3],
            hearing_date=cells[4],
            purpose=cells[5],
            adjournment=cells[6],
        )
    pairs = _keyed_pairs(row)
    return pairs or None


def _caveat_row(row: Tag) -> Optional[CaveatEntry]:
    if "No records" in row.get_text():
        return None
    cells = _cell_texts(row)
    if len(cells) < 7:
        return None
    return CaveatEntry(
        serial=cells[0],
        filing_no=cells[1],
        caveat_no=cells[2],
        petitioner=cells[3],
        respondent=cells[4],
        counsel=cells[5],
        filing_date=cells[6],
    )


def _order_row(row: Tag) -> Optional[OrderEntry]:
    if "No records" in row.get_text():
        return None
    cells = row.find_all("td")
    if len(cells) < 7:
        return None
    texts = [clean_text(cell.get_text()) for cell in cells[:6]]
    links = tuple(
        OrderLink(text=clean_text(anchor.get_text()), href=anchor.get("href") or "")
        for anchor in cells[6].find_all("a")
    )
    return OrderEntry(
        serial=texts[0],
        case_details=texts[1],
        petitioner=texts[2],
        respondent=texts[3],
        order_date=texts[4],
        judge=texts[5],
        order_copy_links=links,
    )


_DEFAULT_EXTRACTOR = CaseStatusExtractor()


def extract(html: str) -> CaseRecord:
    """Parse a result fragment with the default heading-based section locator."""

    return _DEFAULT_EXTRACTOR.extract(html)


__all__ = [
    "CaseStatusExtractor",
    "HeadingSectionLocator",
    "SectionLocator",
    "extract",
]
