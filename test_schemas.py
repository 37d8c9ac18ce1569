import math

import pytest

from pageguard.schemas import AssessmentResult, FormDescriptor, PagePayload


def test_collector_aliases():
    payload = PagePayload.coerce({
        "handle": "@Alice ",
        "fullName": " Alice Smith",
        "pageUrl": "https://x.com/alice",
        "linkList": ["https://a.com", 3, None],
        "formList": [{"hasPassword": 1, "inputCount": "3"}, "junk"],
        "canonical": "https://x.com/",
        "timestamp": 1700000000000,
    })
    assert payload.username == "alice"
    assert payload.display_name == "alice smith"
    assert payload.url == "https://x.com/alice"
    assert payload.links == ["https://a.com", 3, None]
    assert len(payload.forms) == 2
    assert payload.forms[0].has_password is True
    assert payload.forms[0].input_count == 3
    assert payload.forms[1] == FormDescriptor()
    assert payload.canonical_url == "https://x.com/"
    assert payload.og_url is None
    assert payload.timestamp == 1700000000000


def test_primary_keys_win_over_aliases():
    payload = PagePayload.coerce({"url": "https://a.com", "pageUrl": "https://b.com", "title": "T"})
    assert payload.url == "https://a.com"
    assert payload.display_name == "t"


def test_non_mapping_becomes_empty_payload():
    for value in (None, "text", 12, ["a"]):
        assert PagePayload.coerce(value) == PagePayload()


def test_wrong_types_fall_back_to_defaults():
    payload = PagePayload.coerce({
        "url": 5,
        "links": "https://a.com",
        "forms": {"action": "x"},
        "textSample": ["a"],
        "timestamp": "yesterday",
    })
    assert payload.url == ""
    assert payload.links == []
    assert payload.forms == []
    assert payload.text_sample == ""
    assert payload.timestamp is None


def test_form_input_count_coercion():
    assert FormDescriptor.model_validate({"inputCount": -5}).input_count == 0
    assert FormDescriptor.model_validate({"inputCount": 2.7}).input_count == 2
    assert FormDescriptor.model_validate({"inputCount": True}).input_count == 0
    assert FormDescriptor.model_validate({"method": "POST"}).method == "post"


def test_coerce_returns_existing_payload():
    payload = PagePayload(url="https://a.com")
    assert PagePayload.coerce(payload) is payload


def test_result_serializes_with_camel_case_details():
    result = AssessmentResult(suspicious=False, score=0.1)
    data = result.model_dump(by_alias=True)
    assert "pageHostname" in data["details"]
    assert "linksCount" in data["details"]


@pytest.mark.parametrize("count, expected", [
    ("3", 3),
    (" 4 ", 4),
    ("many", 0),
    (math.nan, 0),
    (math.inf, 0),
    ("-inf", 0),
    (None, 0),
])
def test_form_input_count_numbers(count, expected):
    assert FormDescriptor.model_validate({"inputCount": count}).input_count == expected


@pytest.mark.parametrize("timestamp", [math.inf, -math.inf, math.nan, "1e400", True])
def test_non_finite_timestamp_is_dropped(timestamp):
    payload = PagePayload.coerce({"url": "https://example.org/", "timestamp": timestamp})
    assert payload.url == "https://example.org/"
    assert payload.timestamp is None


def test_numeric_string_timestamp():
    assert PagePayload.coerce({"timestamp": "1700000000000"}).timestamp == 1700000000000


def test_one_bad_form_keeps_the_rest_of_the_page():
    payload = PagePayload.coerce({
        "url": "https://faceboook.com/",
        "forms": [None, {"action": "https://x.org/s", "inputCount": math.nan}],
    })
    assert payload.url == "https://faceboook.com/"
    assert payload.forms[0] is None
    assert payload.forms[1].input_count == 0
