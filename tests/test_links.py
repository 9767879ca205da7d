import pytest
from papi_client.errors import InvalidResponseLinkError
from papi_client.links import parse_link, parse_link_number


def test_last_path_segment_is_returned():
    link = "/papi/v1/cpcodes/123?contractId=contract-1TJZFW&groupId=group"
    assert parse_link(link) == "123"


def test_absolute_links_are_accepted():
    assert parse_link("https://host.example/papi/v1/properties/prp_173136") == "prp_173136"


def test_malformed_link_raises():
    with pytest.raises(InvalidResponseLinkError) as exc:
        parse_link(":", operation="creating CP code")

    assert exc.value.link == ":"
    assert exc.value.reason.startswith("invalid link:")
    assert str(exc.value).startswith("creating CP code: invalid response link")


def test_link_without_identifier_raises():
    with pytest.raises(InvalidResponseLinkError):
        parse_link("/papi/v1/cpcodes/")


def test_numeric_link():
    assert parse_link_number("/papi/v1/properties/prp_1/versions/2?contractId=ctr_1") == 2


def test_non_numeric_identifier_raises():
    with pytest.raises(InvalidResponseLinkError) as exc:
        parse_link_number("/papi/v1/properties/prp_1/versions/latest")

    assert exc.value.reason == "invalid link: not a number"
