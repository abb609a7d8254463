"""Tests for best-effort header and body extraction"""
from datetime import UTC, datetime

import pytest

from integrations.imap.client import extract_body, parse_date, parse_from_header, parse_subject


@pytest.mark.parametrize(
    "header, expected",
    [
        ('From: "Jane Doe" <jane@example.com>', ("jane@example.com", "Jane Doe")),
        ("From: jane@example.com", ("jane@example.com", None)),
        ("From: Jane Doe <jane@example.com>", ("jane@example.com", "Jane Doe")),
        ("From: <jane@example.com>", ("jane@example.com", None)),
        ('from: "Doe, Jane" <jane@example.com>', ("jane@example.com", "Doe, Jane")),
        ("From: undisclosed", ("", None)),
        ("Subject: no sender here", ("", None)),
    ],
)
def test_parse_from_header(header, expected):
    assert parse_from_header(header) == expected


def test_parse_from_uses_first_from_line():
    text = "Date: Tue, 1 Apr 2025 08:00:00 +0000\r\nFrom: a@example.com\r\nFrom: b@example.com"

    assert parse_from_header(text) == ("a@example.com", None)


def test_parse_subject_unfolds_continuation_lines():
    text = "Subject: Black Friday:\r\n\t50% off\r\n   everything\r\nDate: x"

    assert parse_subject(text) == "Black Friday: 50% off everything"


def test_parse_subject_missing():
    assert parse_subject("From: a@example.com") == ""


def test_parse_date_valid():
    parsed = parse_date("Date: Tue, 01 Apr 2025 08:30:00 +0000")

    assert parsed == datetime(2025, 4, 1, 8, 30, tzinfo=UTC)


@pytest.mark.parametrize(
    "text",
    [
        "Date: garbage",
        "Date:",
        "no date header",
        "Date: Tue, 1 Apr 99999999999999999999 08:30:00 +0000",
    ],
)
def test_parse_date_falls_back_to_now(text):
    before = datetime.now(UTC)
    parsed = parse_date(text)
    after = datetime.now(UTC)

    assert before <= parsed <= after


def test_parse_date_without_timezone_is_utc():
    parsed = parse_date("Date: Tue, 01 Apr 2025 08:30:00 -0000")

    assert parsed.tzinfo is not None
    assert parsed == datetime(2025, 4, 1, 8, 30, tzinfo=UTC)


class TestExtractBody:
    """HTML/text classification of the BODY[TEXT] literal"""

    def test_div_marks_html(self):
        html, text = extract_body("* 1 FETCH (BODY[TEXT] {30}\r\n<p>Hi</p><div>deal</div>")

        assert html == "<p>Hi</p><div>deal</div>"
        assert text is None

    def test_uppercase_markers_are_html(self):
        html, text = extract_body("BODY[TEXT] {20}\r\n<HTML><BODY>x</BODY></HTML>")

        assert html is not None
        assert text is None

    def test_plain_text(self):
        html, text = extract_body("BODY[TEXT] {11}\r\nHello there")

        assert html is None
        assert text == "Hello there"

    def test_declared_length_is_not_enforced(self):
        _, text = extract_body("BODY[TEXT] {3}\r\nmuch longer than three bytes")

        assert text == "much longer than three bytes"

    def test_missing_marker(self):
        assert extract_body("* 1 FETCH (FLAGS (\\Seen))") == (None, None)

    def test_empty_body(self):
        assert extract_body("BODY[TEXT] {0}\r\n") == (None, None)
