from __future__ import annotations

import json
from typing import Optional

import pytest
from bs4 import BeautifulSoup
from bs4.element import Tag

from cnrlookup.scraper.extractor import CaseStatusExtractor, HeadingSectionLocator, extract
from cnrlookup.scraper.models import HearingEntry, LowerCourtEntry, OrderLink

SAMPLE_FRAGMENT = """
<table class="table_caseno_search">
  <tr><th>Case No.</th><td>WP 123/2020</td><th>CNR Number</th><td> HCMA01   0001 </td></tr>
  <tr><th>Status</th><td>Pending</td><th>Next Hearing</th><td></td></tr>
  <tr><th>case no</th><td>WP 123/2020 (updated)</td></tr>
  <tr><th>Petitioner Details</th><td>  A. Kumar
      and others </td></tr>
  <tr><th>Respondent Details</th><td>State of Tamil Nadu</td></tr>
  <tr><th>Petitioner Counsel</th><td>M/s. R. Rao</td></tr>
  <tr><th>Respondent Counsel</th><td>Govt. Pleader</td></tr>
  <tr><th>Main Prayer</th><td>To quash the order</td></tr>
</table>
<h4>Lower Court Details</h4>
<table>
  <tr><th>Sl No</th><th>Case No</th><th>Court</th><th>Order Date</th></tr>
  <tr><td>1</td><td>OS 45/2018</td><td>District Court, Salem</td><td>01-02-2019</td></tr>
</table>
<h4>Applications Details</h4>
<table>
  <tr><td>IA 1/2020</td><td>Interim stay</td><td>02-03-2020</td><td>Petitioner</td></tr>
  <tr style="font-weight: bold"><td>Total</td><td>1</td><td></td><td></td></tr>
</table>
<h4>Connected Matters</h4>
<table>
  <tr><td colspan="2">No Records Found</td></tr>
</table>
<h4>History of Case Hearing</h4>
<table>
  <tr>
    <td>Hon'ble Justice X</td><td>12</td><td>01-01-2021</td><td>Hearing</td>
    <td>15-01-2021</td><td>For Orders</td><td>Adjourned</td>
  </tr>
  <tr><th>Stage</th><td>Admission</td><th>Remarks</th><td>Listed</td><td>-</td></tr>
</table>
<h4>Caveat Details</h4>
<table>
  <tr><td colspan="7">No records found</td></tr>
</table>
<h4>Orders</h4>
<table>
  <thead><tr><th>Sl</th><th>Case</th><th>Petitioner</th><th>Respondent</th><th>Date</th><th>Judge</th><th>Copy</th></tr></thead>
  <tbody>
    <tr>
      <td>1</td><td>WP 123/2020</td><td>A. Kumar</td><td>State</td><td>10-02-2021</td><td>Justice X</td>
      <td><a href="/orders/1.pdf">Order 1</a> <a href="/orders/1b.pdf"> Order   1B </a></td>
    </tr>
  </tbody>
</table>
"""


def test_sample_fragment_sections() -> None:
    record = extract(SAMPLE_FRAGMENT)

    assert record.lower_court_details == (
        LowerCourtEntry(
            serial="1",
            case_no="OS 45/2018",
            court_name="District Court, Salem",
            order_date="01-02-2019",
        ),
    )
    assert len(record.applications) == 1
    assert record.applications[0].ia_no == "IA 1/2020"
    assert record.connected_matters == ()
    assert record.caveat_details == ()

    assert len(record.orders) == 1
    order = record.orders[0]
    assert order.judge == "Justice X"
    assert order.order_copy_links == (
        OrderLink(text="Order 1", href="/orders/1.pdf"),
        OrderLink(text="Order 1B", href="/orders/1b.pdf"),
    )


def test_basic_info_last_write_wins_and_skips_empty_values() -> None:
    record = extract(SAMPLE_FRAGMENT)

    assert record.basic_info["case_no"] == "WP 123/2020 (updated)"
    assert record.basic_info["cnr_number"] == "HCMA01 0001"
    assert record.basic_info["status"] == "Pending"
    assert "next_hearing" not in record.basic_info


def test_label_scan_fields() -> None:
    record = extract(SAMPLE_FRAGMENT)

    assert record.petitioner_details == "A. Kumar and others"
    assert record.respondent_details == "State of Tamil Nadu"
    assert record.petitioner_counsel == "M/s. R. Rao"
    assert record.respondent_counsel == "Govt. Pleader"
    assert record.main_prayer == "To quash the order"


def test_case_history_keeps_both_row_shapes() -> None:
    record = extract(SAMPLE_FRAGMENT)

    assert len(record.case_history) == 2
    positional, keyed = record.case_history
    assert isinstance(positional, HearingEntry)
    assert positional.item_no == "12"
    assert positional.adjournment == "Adjourned"
    assert keyed == {"stage": "Admission", "remarks": "Listed"}


def test_history_row_without_headers_is_dropped() -> None:
    html = """
    <h4>History of Case Hearing</h4>
    <table><tr><td>only</td><td>two</td></tr></table>
    """

    assert extract(html).case_history == ()


def test_missing_sections_default_to_empty() -> None:
    record = extract("<div>Nothing to see</div>")

    assert record.basic_info == {}
    assert record.petitioner_details == ""
    assert record.main_prayer == ""
    assert record.lower_court_details == ()
    assert record.applications == ()
    assert record.case_history == ()
    assert record.orders == ()


def test_heading_must_be_followed_directly_by_table() -> None:
    html = """
    <h4>Lower Court Details</h4>
    <p>No lower court</p>
    <table><tr><td>1</td><td>OS 1/2000</td><td>Court</td><td>01-01-2000</td></tr></table>
    """

    assert extract(html).lower_court_details == ()


def test_short_rows_are_skipped() -> None:
    html = """
    <h4>Orders</h4>
    <table><tr><td>1</td><td>WP 1/2020</td><td>Someone</td></tr></table>
    <h4>Caveat Details</h4>
    <table>
      <tr><td>1</td><td>F1</td><td>C1</td><td>P</td><td>R</td><td>Counsel</td><td>01-01-2020</td></tr>
    </table>
    """

    record = extract(html)
    assert record.orders == ()
    assert len(record.caveat_details) == 1
    assert record.caveat_details[0].caveat_no == "C1"


def test_order_row_without_links() -> None:
    html = """
    <h4>Orders</h4>
    <table><tr>
      <td>1</td><td>WP 1/2020</td><td>P</td><td>R</td><td>01-01-2020</td><td>J</td><td>Not uploaded</td>
    </tr></table>
    """

    record = extract(html)
    assert record.orders[0].order_copy_links == ()


class DataTitleLocator:
    def locate(self, soup: BeautifulSoup, title: str) -> Optional[Tag]:
        wrapper = soup.find("div", attrs={"data-title": title})
        return wrapper.find("table") if wrapper is not None else None


def test_custom_section_locator() -> None:
    html = """
    <div data-title="Connected Matters">
      <table><tr><td>CRP 5/2021</td><td>Disposed</td></tr></table>
    </div>
    """

    default = CaseStatusExtractor(locator=HeadingSectionLocator())
    custom = CaseStatusExtractor(locator=DataTitleLocator())

    assert default.extract(html).connected_matters == ()
    matters = custom.extract(html).connected_matters
    assert len(matters) == 1
    assert matters[0].case_no == "CRP 5/2021"
    assert matters[0].stage == "Disposed"


def test_to_dict_is_json_ready() -> None:
    payload = extract(SAMPLE_FRAGMENT).to_dict()

    assert payload["orders"][0]["order_copy_links"][1] == {
        "text": "Order 1B",
        "href": "/orders/1b.pdf",
    }
    assert payload["case_history"][1] == {"stage": "Admission", "remarks": "Listed"}
    assert isinstance(payload["lower_court_details"], list)
    json.dumps(payload)


def test_record_mappings_are_read_only() -> None:
    record = extract(SAMPLE_FRAGMENT)
    keyed = record.case_history[1]

    with pytest.raises(TypeError):
        record.basic_info["injected"] = "x"
    with pytest.raises(TypeError):
        keyed["stage"] = "Disposed"

    assert "injected" not in record.basic_info
    assert keyed["stage"] == "Admission"


def test_to_dict_returns_plain_dicts() -> None:
    payload = extract(SAMPLE_FRAGMENT).to_dict()

    assert type(payload["basic_info"]) is dict
    assert type(payload["case_history"][1]) is dict
    payload["basic_info"]["extra"] = "ok"
