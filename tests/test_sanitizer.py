from app.services.sanitizer import (
    LINK_PLACEHOLDER,
    MENTION_PLACEHOLDER,
    sanitize_content,
)


def test_scheme_urls_are_replaced():
    text = "see https://evil.example/path?x=1 and http://a.b"
    assert sanitize_content(text) == f"see {LINK_PLACEHOLDER} and {LINK_PLACEHOLDER}"


def test_www_and_telegram_links_are_replaced():
    assert sanitize_content("go www.site.org now") == f"go {LINK_PLACEHOLDER} now"
    assert sanitize_content("join t.me/channel") == f"join {LINK_PLACEHOLDER}"
    assert sanitize_content("join telegram.me/group") == f"join {LINK_PLACEHOLDER}"


def test_bare_domains_on_known_tlds_are_replaced():
    assert sanitize_content("visit example.com") == f"visit {LINK_PLACEHOLDER}"
    assert sanitize_content("visit Shop.IO/deals") == f"visit {LINK_PLACEHOLDER}/deals"


def test_file_names_survive():
    text = "wrote server.log and backup.zip to disk"
    assert sanitize_content(text) == text


def test_mentions_need_three_word_characters():
    assert sanitize_content("ping @admin please") == f"ping {MENTION_PLACEHOLDER} please"
    assert sanitize_content("x @ab y") == "x @ab y"


def test_sanitizing_is_idempotent():
    text = "from @someone via https://x.io/a and www.y.net, mail at t.me/z"
    once = sanitize_content(text)
    assert sanitize_content(once) == once


def test_empty_values_pass_through():
    assert sanitize_content("") == ""
    assert sanitize_content(None) is None


def test_plain_log_lines_are_untouched():
    text = "2024-01-01 12:00:00 ERROR worker[3]: connection reset (code=104)"
    assert sanitize_content(text) == text
