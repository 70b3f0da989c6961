import re

from foxbit_client import signing


def test_sign_matches_known_hmac_sha256_vector():
    sig = signing.sign("The quick brown fox jumps over the lazy dog", "key")
    assert sig == "f7bc83f430538424b13298e6aa6fb143ef4d59a14946175997479dbc2d1a3cd8"


def test_sign_is_deterministic_lowercase_hex():
    s1 = signing.sign("1700000000000GET/rest/v3/currencies", "SECRET")
    s2 = signing.sign("1700000000000GET/rest/v3/currencies", "SECRET")
    assert s1 == s2
    assert re.fullmatch(r"[0-9a-f]{64}", s1)


def test_sign_accepts_any_secret_length():
    assert len(signing.sign("x", "")) == 64
    assert len(signing.sign("x", "s" * 500)) == 64


def test_canonicalize_without_query_or_body():
    prehash = signing.canonicalize("GET", "/rest/v3", "/currencies", "1700000000000")
    assert prehash == "1700000000000GET/rest/v3/currencies"


def test_canonicalize_concatenates_query_and_body_in_order():
    prehash = signing.canonicalize(
        "POST", "/rest/v3", "/orders", "1700000000000", "depth=50", '{"side":"BUY"}'
    )
    assert prehash == '1700000000000POST/rest/v3/ordersdepth=50{"side":"BUY"}'


def test_compact_json_sorts_keys_without_spaces():
    # ASCII-sorted => a then b
    assert signing.compact_json({"b": 2, "a": 1}) == '{"a":1,"b":2}'
    assert signing.compact_json({"remark": "ação"}) == '{"remark":"ação"}'


def test_compact_json_empty_body():
    assert signing.compact_json(None) == ""
    assert signing.compact_json({}) == ""


def test_timestamp_ms_is_millisecond_digits(monkeypatch):
    monkeypatch.setattr(signing.time, "time", lambda: 1700000000.123456)
    assert signing.timestamp_ms() == "1700000000123"
