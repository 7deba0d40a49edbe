"""Tests for the lexical helpers."""

from ipaddress import ip_address

import pytest
from namedctl.errors import InvalidIpAddress, ParseError
from namedctl.models import PrimarySpec
from namedctl.parser.lexer import (
    normalize_raw,
    parse_identifier,
    parse_ip_addr,
    parse_ip_with_port,
    parse_quoted_string,
    quote,
    skip_ignorable,
)


def test_skip_ignorable_all_comment_styles():
    text = "  // line\n  /* block\n comment */ # hash\n  zone"
    assert text[skip_ignorable(text):] == "zone"


def test_skip_ignorable_from_offset():
    text = "type   primary;"
    assert skip_ignorable(text, 4) == 7


def test_quoted_string_plain():
    assert parse_quoted_string('"example.com"') == "example.com"


def test_quoted_string_escapes():
    assert parse_quoted_string(r'"a\"b\\c\nd"') == 'a"b\\c\nd'


def test_quoted_string_octal_escape():
    assert parse_quoted_string(r'"\101\102"') == "AB"


def test_quoted_string_tolerates_comments():
    assert parse_quoted_string(' /* c */ "value" // trailing\n') == "value"


def test_quote_is_inverse_of_parse():
    value = 'path with "quotes" and \\ backslash\n'
    assert parse_quoted_string(quote(value)) == value


def test_unterminated_string_fails():
    with pytest.raises(ParseError):
        parse_quoted_string('"never closed')


def test_identifier():
    assert parse_identifier("max-transfer_time1") == "max-transfer_time1"


def test_identifier_rejects_quotes():
    with pytest.raises(ParseError) as exc_info:
        parse_identifier('"quoted"')
    assert exc_info.value.remaining.startswith('"quoted"')


def test_ipv4():
    assert parse_ip_addr("10.0.0.1") == ip_address("10.0.0.1")


def test_ipv6():
    assert parse_ip_addr("2001:db8::1") == ip_address("2001:db8::1")


def test_cidr_suffix_is_dropped():
    assert parse_ip_addr("10.244.1.18/32") == parse_ip_addr("10.244.1.18")
    assert parse_ip_addr("2001:db8::1/128") == ip_address("2001:db8::1")


def test_invalid_ip():
    with pytest.raises(InvalidIpAddress):
        parse_ip_addr("999.1.1.1")
    with pytest.raises(InvalidIpAddress):
        parse_ip_addr("not-an-address")


def test_ip_with_port():
    assert parse_ip_with_port("10.0.0.1 port 5353") == PrimarySpec(ip_address("10.0.0.1"), 5353)
    assert parse_ip_with_port("  2001:db8::2 ") == PrimarySpec(ip_address("2001:db8::2"))


def test_ip_with_port_out_of_range():
    with pytest.raises(InvalidIpAddress):
        parse_ip_with_port("10.0.0.1 port 70000")


def test_normalize_raw_strips_comments_and_collapses_whitespace():
    text = '{\n\tkey "a  b";   // why\n\t/* x */ any;\n}'
    assert normalize_raw(text) == '{ key "a  b"; any; }'


def test_normalize_raw_keeps_comment_markers_inside_strings():
    assert normalize_raw('"http://example.com/#frag"') == '"http://example.com/#frag"'
