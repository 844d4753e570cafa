"""
Unit tests for acnc_docs.core

Tests the listing interpretation and PDF extraction logic without any network.
"""
import pytest
from pypdf import PdfWriter
from io import BytesIO

from acnc_docs.adapters.pdf import PypdfDecoder
from acnc_docs.core import (
    Document,
    DocumentType,
    InvalidInput,
    PdfTextExtractor,
    classify_title,
    find_charity_link,
    looks_like_pdf,
    parse_documents,
    pick_document_link,
    select_latest,
    validate_abn,
)
from acnc_docs.core.ports import PdfDecoder
from acnc_docs.core.urls import abs_url, documents_url, profile_url, search_url

BASE = "https://www.acnc.gov.au"


class FakeDecoder(PdfDecoder):
    """Yields canned page texts, optionally failing after some pages"""

    def __init__(self, pages, fail_after=None):
        self.pages = pages
        self.fail_after = fail_after
        self.pages_read = 0

    def iter_page_texts(self, data):
        for index, text in enumerate(self.pages):
            if self.fail_after is not None and index >= self.fail_after:
                raise ValueError("corrupt xref")
            self.pages_read += 1
            yield text


class TestAbnValidation:
    """Test ABN normalization."""

    def test_spaces_and_punctuation_stripped(self):
        """Test separators are stripped before validation."""
        assert validate_abn("11 005 357 522") == "11005357522"
        assert validate_abn("11-005-357-522") == "11005357522"

    @pytest.mark.parametrize("raw", ["", None, "123", "123456789012", "abc", "11 005 357 52"])
    def test_wrong_length_rejected(self, raw):
        """Test anything but 11 digits is rejected as input validation."""
        with pytest.raises(InvalidInput) as exc_info:
            validate_abn(raw)
        assert exc_info.value.step == "input-validation"
        assert exc_info.value.message == "ABN must be 11 digits"

    @pytest.mark.parametrize("raw,reported", [("abc", "abc"), ("123", "123"), (12345, "12345"), (None, "")])
    def test_error_carries_identifier_as_supplied(self, raw, reported):
        """Test the error reports the identifier as supplied."""
        with pytest.raises(InvalidInput) as exc_info:
            validate_abn(raw)
        assert exc_info.value.abn == reported


class TestClassifier:
    """Test title classification."""

    def test_ais(self):
        """Test an Annual Information Statement title."""
        assert classify_title("2023 Annual Information Statement") == (DocumentType.AIS, 2023)

    def test_financial_report(self):
        """Test a Financial Report title."""
        assert classify_title("Financial Report 2021") == (DocumentType.FINANCIAL_REPORT, 2021)

    def test_other(self):
        """Test an unrelated title is Other."""
        assert classify_title("Notice of Change") == (DocumentType.OTHER, None)

    def test_ais_abbreviation(self):
        """Test the AIS abbreviation is recognized."""
        assert classify_title("AIS 2019") == (DocumentType.AIS, 2019)

    def test_ais_inside_word_is_not_ais(self):
        """'ais' inside another word does not make a title an AIS."""
        doc_type, year = classify_title("Fundraising appraisal financial statements 2020")
        assert doc_type is DocumentType.FINANCIAL_REPORT
        assert year == 2020

    def test_ais_wins_over_financial(self):
        """Test AIS takes precedence over financial wording."""
        doc_type, _ = classify_title("2022 Annual Information Statement - financial section")
        assert doc_type is DocumentType.AIS

    def test_first_year_taken(self):
        """Test the first four-digit year in a title is used."""
        assert classify_title("Financial Report 2021 (amended 2022)")[1] == 2021

    def test_year_outside_range_ignored(self):
        """Test implausible years are ignored."""
        assert classify_title("Financial Report 1999")[1] is None


class TestPickDocumentLink:
    """Test link preference within a row."""

    def test_pdf_preferred(self):
        """Test a PDF link is preferred over others."""
        anchors = [("/view/1", "View"), ("/files/report.PDF", "Report")]
        assert pick_document_link(anchors) == "/files/report.PDF"

    def test_pdf_with_query_string(self):
        """Test a PDF link with a query string still counts."""
        anchors = [("/x", "Details"), ("/files/report.pdf?v=2", "file")]
        assert pick_document_link(anchors) == "/files/report.pdf?v=2"

    def test_action_text_next(self):
        """Test view or download link text is the second choice."""
        anchors = [("/details/1", "Details"), ("/get/2", "  Download  ")]
        assert pick_document_link(anchors) == "/get/2"

    def test_first_anchor_last(self):
        """Test the first anchor is the last resort."""
        anchors = [("/details/1", "Details"), ("/other/2", "Other")]
        assert pick_document_link(anchors) == "/details/1"

    def test_no_usable_anchor(self):
        """Test a row without a usable link yields nothing."""
        assert pick_document_link([]) is None
        assert pick_document_link([("  ", "Download")]) is None


LISTING_HTML = """
<table>
  <thead><tr><th>Document</th><th>Link</th></tr></thead>
  <tbody>
    <tr>
      <td>2022 Annual Information Statement</td>
      <td><a href="/charity/charities/abc-123/ais-2022.pdf">View</a></td>
    </tr>
    <tr>
      <td>
        2021   Financial
        Report
      </td>
      <td><a href="https://files.acnc.gov.au/fr-2021.pdf">Download</a></td>
    </tr>
    <tr><td></td><td><a href="/orphan.pdf">Download</a></td></tr>
    <tr><td>Notice of Change</td><td>No link</td></tr>
    <tr><td>Governing document &amp; rules</td><td><a href='/gov'>Details</a></td></tr>
  </tbody>
</table>
"""


class TestParseDocuments:
    """Test documents listing parsing."""

    def test_rows_parsed_in_order(self):
        """Test listing rows are parsed in page order."""
        docs = parse_documents(LISTING_HTML, BASE)

        assert [d.title for d in docs] == [
            "2022 Annual Information Statement",
            "2021 Financial Report",
            "Governing document & rules",
        ]
        assert docs[0] == Document(
            year=2022,
            type=DocumentType.AIS,
            source_url="https://www.acnc.gov.au/charity/charities/abc-123/ais-2022.pdf",
            title="2022 Annual Information Statement",
        )
        assert docs[1].source_url == "https://files.acnc.gov.au/fr-2021.pdf"
        assert docs[2].type is DocumentType.OTHER
        assert docs[2].year is None

    def test_idempotent(self):
        """Test parsing the same page twice gives the same result."""
        assert parse_documents(LISTING_HTML, BASE) == parse_documents(LISTING_HTML, BASE)

    def test_row_without_title_skipped(self):
        """Test rows without a title are skipped."""
        html = '<tr><td>  </td><td><a href="/a.pdf">Download</a></td></tr>'
        assert parse_documents(html, BASE) == []

    def test_row_without_anchor_skipped(self):
        """Test rows without a link are skipped."""
        html = "<tr><td>2020 Financial Report</td><td>pending</td></tr>"
        assert parse_documents(html, BASE) == []

    def test_header_and_garbage_tolerated(self):
        """Test header rows and stray markup are tolerated."""
        assert parse_documents("<tr><th>Title</th></tr><tr><td>", BASE) == []
        assert parse_documents("", BASE) == []


SEARCH_HTML = """
<table><tbody>
  <tr>
    <td><a href="/charity/charities/other-999/profile">Someone Else</a></td>
    <td>98 765 432 109</td>
  </tr>
  <tr>
    <td><a href="/charity/charities/abc-123/profile">Example Charity</a></td>
    <td>12 345 678 901</td>
  </tr>
</tbody></table>
"""


class TestFindCharityLink:
    """Test search-result link resolution."""

    def test_row_with_spaced_abn(self):
        """Test a result row showing the grouped ABN matches."""
        assert find_charity_link(SEARCH_HTML, "12345678901") == "/charity/charities/abc-123/profile"

    def test_row_with_plain_abn(self):
        """Test a result row showing the bare ABN matches."""
        html = '<tr><td><a href="/charity/charities/xyz/profile">X</a></td><td>12345678901</td></tr>'
        assert find_charity_link(html, "12345678901") == "/charity/charities/xyz/profile"

    def test_uuid_link_preferred(self):
        """Test the charity UUID link is preferred."""
        uuid = "0f8fad5b-d9cb-469f-a165-70867728950e"
        html = (
            '<tr><td>12345678901</td>'
            '<td><a href="/charity/charities/some-slug">Slug</a>'
            f'<a href="/charity/charities/{uuid}/profile">Profile</a></td></tr>'
        )
        assert find_charity_link(html, "12345678901") == f"/charity/charities/{uuid}/profile"

    def test_no_matching_row(self):
        """Test a search page without the ABN yields nothing."""
        assert find_charity_link(SEARCH_HTML, "11111111111") is None

    def test_matching_row_without_link(self):
        """Test a matching row without a charity link yields nothing."""
        html = "<tr><td>12 345 678 901</td><td>No profile</td></tr>"
        assert find_charity_link(html, "12345678901") is None


class TestUrls:
    """Test register URL helpers."""

    def test_search_url(self):
        """Test the register search URL."""
        assert search_url("12345678901", BASE + "/") == (
            "https://www.acnc.gov.au/charity/charities?search=12345678901"
        )

    def test_abs_url(self):
        """Test relative links are resolved against the page."""
        assert abs_url("/a/b.pdf", BASE) == "https://www.acnc.gov.au/a/b.pdf"
        assert abs_url("https://x.test/a.pdf", BASE) == "https://x.test/a.pdf"

    def test_profile_documents_round_trip(self):
        """Test profile and documents URLs convert both ways."""
        profile = "https://www.acnc.gov.au/charity/charities/abc-123/profile"
        docs = documents_url(profile)
        assert docs == "https://www.acnc.gov.au/charity/charities/abc-123/documents/"
        assert profile_url(docs) == profile

    def test_documents_url_without_profile(self):
        """Test a documents URL built from a bare charity URL."""
        url = "https://www.acnc.gov.au/charity/charities/abc-123"
        assert documents_url(url) == url


def _doc(year, doc_type, name):
    return Document(year=year, type=doc_type, source_url=f"{BASE}/{name}.pdf", title=name)


class TestSelectLatest:
    """Test latest-per-type selection."""

    def test_highest_year_wins_and_undated_ignored(self):
        """Test the newest year wins and undated documents are ignored."""
        docs = [
            _doc(2020, DocumentType.AIS, "a2020"),
            _doc(2022, DocumentType.AIS, "a2022"),
            _doc(None, DocumentType.AIS, "undated"),
        ]
        latest = select_latest(docs)
        assert latest.ais.title == "a2022"
        assert latest.financial_report is None

    def test_types_independent(self):
        """Test each type is selected independently."""
        docs = [
            _doc(2022, DocumentType.AIS, "ais"),
            _doc(2021, DocumentType.FINANCIAL_REPORT, "fr"),
            _doc(2024, DocumentType.OTHER, "other"),
        ]
        latest = select_latest(docs)
        assert latest.ais.year == 2022
        assert latest.financial_report.year == 2021

    def test_tie_goes_to_first_listed(self):
        """Test a year tie goes to the first listed document."""
        docs = [
            _doc(2021, DocumentType.FINANCIAL_REPORT, "first"),
            _doc(2021, DocumentType.FINANCIAL_REPORT, "second"),
        ]
        assert select_latest(docs).financial_report.title == "first"

    def test_only_undated(self):
        """Test no selection when every document is undated."""
        assert select_latest([_doc(None, DocumentType.AIS, "x")]).ais is None


class TestPdfTextExtractor:
    """Test capped extraction."""

    def test_zero_bytes(self):
        """Test empty input yields empty text."""
        extractor = PdfTextExtractor(FakeDecoder(["never"]))
        assert extractor.extract(b"", 100) == ""

    def test_no_signature(self):
        """Test bytes without a PDF signature are not decoded."""
        decoder = FakeDecoder(["never"])
        assert PdfTextExtractor(decoder).extract(b"<html>nope</html>", 100) == ""
        assert decoder.pages_read == 0

    def test_zero_cap(self):
        """Test a zero cap yields empty text."""
        assert PdfTextExtractor(FakeDecoder(["text"])).extract(b"%PDF-1.4", 0) == ""

    def test_pages_collapsed_and_joined(self):
        """Test page whitespace is collapsed and pages are joined."""
        extractor = PdfTextExtractor(FakeDecoder(["Statement  of\n position", "Page two"]))
        assert extractor.extract(b"%PDF-1.4", 1000) == "Statement of position\nPage two\n"

    @pytest.mark.parametrize("cap", [1, 5, 11, 12, 50])
    def test_never_exceeds_cap(self, cap):
        """Test the output never exceeds the cap."""
        extractor = PdfTextExtractor(FakeDecoder(["x" * 10] * 5))
        assert len(extractor.extract(b"%PDF-1.4", cap)) <= cap

    def test_stops_decoding_past_cap(self):
        """Test decoding stops once the cap is reached."""
        decoder = FakeDecoder(["a" * 10] * 100)
        PdfTextExtractor(decoder).extract(b"%PDF-1.4", 25)
        assert decoder.pages_read == 3

    def test_decoder_failure_degrades_to_empty(self):
        """Test a decoder failure yields empty text."""
        extractor = PdfTextExtractor(FakeDecoder(["ok", "ok"], fail_after=1))
        assert extractor.extract(b"%PDF-1.4", 100) == ""

    def test_corrupt_pdf_with_real_decoder(self):
        """Test a corrupt PDF yields empty text with pypdf."""
        extractor = PdfTextExtractor(PypdfDecoder())
        assert extractor.extract(b"%PDF-1.4\n garbage without objects", 100) == ""

    def test_real_pdf_text(self, make_pdf):
        """Test text is extracted from a generated PDF."""
        data = make_pdf("Statement of Financial Position", "Notes to the accounts")
        assert looks_like_pdf(data)

        text = PdfTextExtractor(PypdfDecoder()).extract(data, 1000)
        lines = text.splitlines()
        assert "Financial Position" in lines[0]
        assert "Notes to the accounts" in lines[1]

    def test_real_pdf_cap(self, make_pdf):
        """Test the cap applies to a generated PDF."""
        data = make_pdf("Statement of Financial Position")
        assert len(PdfTextExtractor(PypdfDecoder()).extract(data, 9)) == 9

    def test_blank_pages_from_pdfwriter(self):
        """Test a PDF of blank pages yields empty text."""
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        writer.add_blank_page(width=612, height=792)
        buffer = BytesIO()
        writer.write(buffer)

        text = PdfTextExtractor(PypdfDecoder()).extract(buffer.getvalue(), 100)
        assert text.strip() == ""
