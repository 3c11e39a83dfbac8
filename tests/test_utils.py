import pytest

from src.utils import (
    SHORT_CODE_ALPHABET, generate_short_code, is_short_code_unique,
    is_reserved_short_code, is_valid_short_code, is_valid_url, referrer_origin,
)


class Record:
    def __init__(self, short_code):
        self.short_code = short_code


def test_generate_short_code_length_and_alphabet():
    for _ in range(200):
        code = generate_short_code()
        assert len(code) == 6
        assert all(ch in SHORT_CODE_ALPHABET for ch in code)


def test_generate_short_code_custom_length():
    assert len(generate_short_code(10)) == 10


def test_is_short_code_unique():
    records = [Record("abc123"), Record("XYZ")]
    assert not is_short_code_unique("abc123", records)
    assert is_short_code_unique("ABC123", records)
    assert is_short_code_unique("abc123", [])


@pytest.mark.parametrize("code, expected", [
    ("abc123", True),
    ("A", True),
    ("abc-123", False),
    ("abc 123", False),
    ("код", False),
    ("", False),
])
def test_is_valid_short_code(code, expected):
    assert is_valid_short_code(code) is expected


@pytest.mark.parametrize("url, expected", [
    ("https://example.com", True),
    ("http://localhost:3000/path?q=1", True),
    ("ftp://files.example.com/a.txt", True),
    ("mailto:someone@example.com", True),
    ("example.com", False),
    ("http://", False),
    ("https://example.com:99999", False),
    ("http://exa mple.com", False),
    ("not a url", False),
    ("", False),
])
def test_is_valid_url(url, expected):
    assert is_valid_url(url) is expected


def test_referrer_origin():
    assert referrer_origin(None) == "direct"
    assert referrer_origin("") == "direct"
    assert referrer_origin("https://news.example.com/article/1?x=2") == "https://news.example.com"
    assert referrer_origin("garbage") == "direct"


def test_is_reserved_short_code():
    for code in ("links", "logs", "docs", "redoc"):
        assert is_reserved_short_code(code)
    assert not is_reserved_short_code("Links")
    assert not is_reserved_short_code("abc123")
