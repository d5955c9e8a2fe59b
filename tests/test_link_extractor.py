import logging

from iocost_bot.core.constants import DEFAULT_ALLOWED_PREFIXES
from iocost_bot.parser.link_extractor import extract_links, find_links, is_url_allowed

ALLOWLIST = ("https://trusted.example/files/", "https://bucket.s3.example.com/")


def test_bare_url_in_prose_is_found():
    text = "Here are my results https://trusted.example/files/1/result.json.gz thanks!"
    assert extract_links(text, ALLOWLIST).accepted == [
        "https://trusted.example/files/1/result.json.gz"
    ]


def test_markdown_link_is_found():
    text = "[result.json.gz](https://bucket.s3.example.com/abc.json.gz)"
    assert extract_links(text, ALLOWLIST).accepted == ["https://bucket.s3.example.com/abc.json.gz"]


def test_untrusted_urls_are_rejected():
    text = (
        "https://evil.example/files/x.json.gz and "
        "https://trusted.example/files/ok.json.gz and http://trusted.example/files/plain.json.gz"
    )
    extraction = extract_links(text, ALLOWLIST)
    assert extraction.accepted == ["https://trusted.example/files/ok.json.gz"]
    assert extraction.rejected == [
        "https://evil.example/files/x.json.gz",
        "http://trusted.example/files/plain.json.gz",
    ]


def test_prefix_match_is_case_sensitive():
    extraction = extract_links("https://TRUSTED.example/files/a.json.gz", ALLOWLIST)
    assert extraction.accepted == []


def test_order_and_duplicates_preserved():
    a = "https://trusted.example/files/a.json.gz"
    b = "https://bucket.s3.example.com/b.json.gz"
    text = f"{b}\n{a}\nagain {b}"
    assert extract_links(text, ALLOWLIST).accepted == [b, a, b]


def test_only_allowlisted_urls_are_ever_accepted():
    text = " ".join(f"https://host{i}.example/files/{i}" for i in range(20))
    text += " https://trusted.example/files/keep"
    extraction = extract_links(text, ALLOWLIST)
    assert extraction.accepted == ["https://trusted.example/files/keep"]
    assert len(extraction.rejected) == 20


def test_schemaless_text_and_emails_are_not_links():
    assert find_links("see trusted.example/files/a or mail me@example.com") == []


def test_text_without_links():
    extraction = extract_links("no links here", ALLOWLIST)
    assert extraction.accepted == []
    assert extraction.rejected == []


def test_rejected_urls_are_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="iocost_bot.parser.link_extractor"):
        extract_links("https://evil.example/x", ALLOWLIST)
    assert "https://evil.example/x" in caplog.text


def test_default_allowlist_matches_github_attachments():
    url = "https://github.com/kov/iocost-benchmarks/files/8412345/result.json.gz"
    assert is_url_allowed(url, DEFAULT_ALLOWED_PREFIXES)
    assert not is_url_allowed("https://github.com/someone/else/files/1/x.gz", DEFAULT_ALLOWED_PREFIXES)
