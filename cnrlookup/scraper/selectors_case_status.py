from __future__ import annotations

"""Selectors and text markers for the CNR case-status portal."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CaseStatusSelectors:
    """Page elements driven during one CNR lookup.

    The portal renders the CNR search form inside a tabbed widget; the result
    is injected into ``#cnrno_search_result`` after submission, first as a
    spinner image and then as a set of tables.
    """

    cnr_tab: str = 'a[href="#resp-tab3"]'
    cnr_input: str = "#case_type_name_cnr"
    captcha_image: str = "#cnr_captcha_img"
    captcha_input: str = "#cnr_captcha"
    submit_button: str = '#cnr_searchform input[type="submit"]'
    result_container: str = "#cnrno_search_result"
    result_table: str = "#cnrno_search_result table"
    result_error: str = "#cnrno_search_result span.error"
    result_spinner: str = '#cnrno_search_result img[src*="spinner"]'


@dataclass(frozen=True)
class CaseStatusMarkers:
    """Literal strings used to classify what came back after submission."""

    invalid_captcha: Tuple[str, ...] = (
        "Invalid Captcha",
        "Incorrect Captcha",
        "Captcha not matching",
    )
    spinner: str = "spinner"
    # Compared against the lower-cased result markup.
    not_found: Tuple[str, ...] = (
        "record not found",
        "no search result",
        "invalid cnr",
    )


CASE_STATUS_SELECTORS = CaseStatusSelectors()
CASE_STATUS_MARKERS = CaseStatusMarkers()

__all__ = [
    "CaseStatusSelectors",
    "CaseStatusMarkers",
    "CASE_STATUS_SELECTORS",
    "CASE_STATUS_MARKERS",
]
