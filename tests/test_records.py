from __future__ import annotations

import pytest

from basenames.errors import UnknownRecordKey
from basenames.records import (
    ADDRESS_KEY,
    GLOBAL_KEYS,
    SERVICE_KEYS,
    STANDARD_KEYS,
    TEXT_KEYS,
    RecordCategory,
    RecordKey,
    get_record_category,
    get_record_label,
    get_records_by_category,
    is_standard_key,
    parse_record_key,
    validate_record,
    validate_records,
)


def test_schema_shape():
    assert len(STANDARD_KEYS) == 17
    assert len(GLOBAL_KEYS) == 10
    assert len(SERVICE_KEYS) == 6
    assert STANDARD_KEYS[0] is ADDRESS_KEY is RecordKey.ADDR
    assert len(set(STANDARD_KEYS)) == 17
    assert TEXT_KEYS == STANDARD_KEYS[1:]
    assert [k.value for k in SERVICE_KEYS] == [
        "com.github",
        "com.peepeth",
        "com.linkedin",
        "com.twitter",
        "io.keybase",
        "org.telegram",
    ]


def test_parse_record_key():
    assert parse_record_key("com.twitter") is RecordKey.TWITTER
    assert parse_record_key(RecordKey.EMAIL) is RecordKey.EMAIL
    assert is_standard_key("url")
    assert not is_standard_key("com.discord")
    with pytest.raises(UnknownRecordKey):
        parse_record_key("com.discord")


@pytest.mark.parametrize(
    "key,value",
    [
        ("email", "alice@example.com"),
        ("phone", "+14155551234"),
        ("url", "https://example.com"),
        ("url", "HTTP://EXAMPLE.COM"),
        ("avatar", "https://example.com/a.png"),
        ("addr", "0x" + "aB" * 20),
        ("com.twitter", "alice_01"),
        ("org.telegram", "alice"),
        ("com.github", "alice-dev"),
        ("email", "  alice@example.com  "),
    ],
)
def test_valid_values(key, value):
    res = validate_record(key, value)
    assert res.valid
    assert res.error is None


@pytest.mark.parametrize(
    "key,value,fragment",
    [
        ("email", "alice@", "email"),
        ("phone", "4155551234", "E.164"),
        ("phone", "+04155551234", "E.164"),
        ("phone", "+1234567890123456", "E.164"),
        ("url", "example.com", "http"),
        ("avatar", "ipfs://Qm", "Avatar"),
        ("addr", "0x1234", "Ethereum address"),
        ("com.twitter", "@alice", "Twitter"),
        ("org.telegram", "alice bob", "Telegram"),
        ("com.github", "-alice", "GitHub"),
    ],
)
def test_invalid_values(key, value, fragment):
    res = validate_record(key, value)
    assert not res.valid
    assert fragment in res.error


@pytest.mark.parametrize("value", [None, "", "   "])
def test_empty_is_always_valid(value):
    for key in STANDARD_KEYS:
        assert validate_record(key, value).valid


def test_free_text_and_unknown_keys_accept_anything():
    assert validate_record("description", "@@ anything !!").valid
    assert validate_record("com.linkedin", "in/alice smith").valid
    assert validate_record("io.keybase", "@alice").valid
    assert validate_record("com.discord", "@@@").valid


def test_validate_records_collects_every_failure():
    res = validate_records(
        {
            "email": "nope",
            "phone": "123",
            "url": "https://ok.example",
            "description": "fine",
        }
    )
    assert not res.valid
    assert set(res.errors) == {"email", "phone"}
    assert res.to_dict()["valid"] is False


def test_validate_records_all_valid():
    res = validate_records({RecordKey.EMAIL: "a@b.co", "com.github": "alice"})
    assert res.valid
    assert res.errors == {}


def test_categories():
    assert get_record_category("email") is RecordCategory.CONTACT
    assert get_record_category("description") is RecordCategory.OTHER
    assert get_record_category("avatar") is RecordCategory.PROFILE
    assert get_record_category("keywords") is RecordCategory.PROFILE
    assert get_record_category("phone") is RecordCategory.CONTACT
    assert get_record_category("location") is RecordCategory.CONTACT
    assert get_record_category("org.telegram") is RecordCategory.SOCIAL
    assert get_record_category("io.keybase") is RecordCategory.SOCIAL
    assert get_record_category("url") is RecordCategory.OTHER
    assert get_record_category("addr") is RecordCategory.OTHER


def test_records_by_category_partitions_text_keys():
    groups = get_records_by_category()
    assert set(groups) == set(RecordCategory)
    assert groups[RecordCategory.PROFILE] == [RecordKey.AVATAR, RecordKey.DISPLAY, RecordKey.KEYWORDS]
    assert groups[RecordCategory.CONTACT] == [RecordKey.EMAIL, RecordKey.LOCATION, RecordKey.PHONE]
    assert groups[RecordCategory.SOCIAL] == list(SERVICE_KEYS)
    assert groups[RecordCategory.OTHER] == [
        RecordKey.DESCRIPTION,
        RecordKey.MAIL,
        RecordKey.NOTICE,
        RecordKey.URL,
    ]
    flat = [k for keys in groups.values() for k in keys]
    assert sorted(flat) == sorted(TEXT_KEYS)
    assert ADDRESS_KEY not in flat


def test_labels():
    assert get_record_label("addr") == "Address"
    assert get_record_label(RecordKey.TWITTER) == "Twitter/X"
    assert get_record_label("com.discord") == "com.discord"
