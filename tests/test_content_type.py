"""Tests for upload-time content type detection."""

import pytest

from common.constants import GENERIC_MIME_TYPE
from shareline.content_type import detect_content_type


@pytest.fixture
def pdf_file(tmp_path):
    path = tmp_path / "stored"
    path.write_bytes(b"%PDF-1.7\n...")
    return path


@pytest.fixture
def sniff_calls(monkeypatch):
    calls = []

    def classify(path, sample_size=None):
        calls.append(path)
        return "application/pdf"

    monkeypatch.setattr("shareline.content_type.sniff_content_type", classify)
    return calls


def test_client_hint_wins_in_auto_mode(pdf_file, sniff_calls):
    assert detect_content_type(pdf_file, declared="image/png", strategy="auto") == "image/png"
    assert sniff_calls == []


def test_hint_parameters_are_stripped(pdf_file, sniff_calls):
    assert detect_content_type(pdf_file, declared="Text/Plain; charset=utf-8", strategy="auto") == "text/plain"


@pytest.mark.parametrize("declared", [None, "", GENERIC_MIME_TYPE])
def test_missing_or_generic_hint_falls_through_to_sniffing(pdf_file, sniff_calls, declared):
    assert detect_content_type(pdf_file, declared=declared, strategy="auto") == "application/pdf"
    assert sniff_calls == [pdf_file]


def test_default_strategy_trusts_content_over_hint(pdf_file, sniff_calls):
    assert detect_content_type(pdf_file, declared="image/png") == "application/pdf"
    assert sniff_calls == [pdf_file]


def test_content_strategy_ignores_hint(pdf_file, sniff_calls):
    assert detect_content_type(pdf_file, declared="image/png", strategy="content") == "application/pdf"


def test_declared_strategy_never_sniffs(pdf_file, sniff_calls):
    assert detect_content_type(pdf_file, declared=None, strategy="declared") == GENERIC_MIME_TYPE
    assert detect_content_type(pdf_file, declared="image/png", strategy="declared") == "image/png"
    assert sniff_calls == []


def test_sniffer_failure_falls_back_to_generic(pdf_file, monkeypatch):
    def broken(path, sample_size=None):
        raise OSError("libmagic unavailable")

    monkeypatch.setattr("shareline.content_type.sniff_content_type", broken)

    assert detect_content_type(pdf_file) == GENERIC_MIME_TYPE


def test_generic_sniff_result_falls_back(pdf_file, monkeypatch):
    monkeypatch.setattr(
        "shareline.content_type.sniff_content_type", lambda path, sample_size=None: GENERIC_MIME_TYPE
    )

    assert detect_content_type(pdf_file, declared=GENERIC_MIME_TYPE) == GENERIC_MIME_TYPE


def test_unknown_strategy_behaves_like_content(pdf_file, sniff_calls):
    assert detect_content_type(pdf_file, declared="image/png", strategy="bogus") == "application/pdf"
