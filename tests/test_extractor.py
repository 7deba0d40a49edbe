"""Tests for parse_rndc_conf (single fragments, includes not followed)."""

import os
from ipaddress import ip_address
from pathlib import Path

import pytest
from namedctl.errors import (
    Incomplete,
    InvalidIpAddress,
    InvalidServerAddress,
    MissingField,
    ParseError,
)
from namedctl.models import KeyBlock, OptionsBlock
from namedctl.parser.extractor import is_truncated, parse_rndc_conf

CONFDATA = os.path.join(os.path.dirname(__file__), "confdata", "rndc")


def _fixture(name):
    with open(os.path.join(CONFDATA, name)) as f:
        return f.read()


def test_parse_key_file():
    conf = parse_rndc_conf(_fixture("rndc.key"))
    assert conf.keys == {
        "rndc-key": KeyBlock("rndc-key", "hmac-sha256", "cm5kYy1zZWNyZXQtdmFsdWU="),
        "transfer-key": KeyBlock("transfer-key", "hmac-sha512", "dHJhbnNmZXItc2VjcmV0"),
    }
    assert conf.includes == []


def test_parse_conf_without_following_includes():
    conf = parse_rndc_conf(_fixture("rndc.conf"))
    assert conf.includes == [Path("rndc.key")]
    assert conf.keys == {}

    local = conf.servers["127.0.0.1"]
    assert local.address == ip_address("127.0.0.1")
    assert local.key == "rndc-key"
    assert local.port == 953
    assert local.addresses == [ip_address("127.0.0.1"), ip_address("::1")]

    ns1 = conf.servers["ns1.example.com"]
    assert ns1.address == "ns1.example.com"
    assert ns1.key == "transfer-key"
    assert ns1.port is None

    assert conf.options == OptionsBlock("127.0.0.1", "rndc-key", 953)


def test_empty_input():
    conf = parse_rndc_conf("  // nothing here\n")
    assert conf.keys == {} and conf.servers == {} and conf.options.is_empty()


def test_bare_key_name_and_default_algorithm():
    conf = parse_rndc_conf('key local { secret "abc="; };')
    assert conf.keys["local"] == KeyBlock("local", "hmac-sha256", "abc=")


def test_missing_secret():
    with pytest.raises(MissingField) as exc_info:
        parse_rndc_conf('key "k" { algorithm hmac-md5; };')
    assert exc_info.value.expected == "secret"


def test_unknown_fields_in_blocks_are_skipped():
    conf = parse_rndc_conf(
        'key "k" { algorithm hmac-md5; secret "s"; comment { anything; }; };\n'
        "server localhost { source-address 10.0.0.1; port 953; };\n"
        'options { default-source-address 10.0.0.1; default-key "k"; };\n'
    )
    assert conf.keys["k"].secret == "s"
    assert conf.servers["localhost"].port == 953
    assert conf.options.default_key == "k"


def test_braces_in_comments_inside_unknown_fields():
    conf = parse_rndc_conf(
        "options { foo { a; /* } */ }; default-port 953; };\n"
        "server localhost { bar { // {\n }; port 954; };\n"
    )
    assert conf.options.default_port == 953
    assert conf.servers["localhost"].port == 954


def test_unknown_top_level_statement():
    with pytest.raises(ParseError) as exc_info:
        parse_rndc_conf("logging { channel default_log; };")
    assert type(exc_info.value) is ParseError


def test_invalid_server_address():
    with pytest.raises(InvalidServerAddress):
        parse_rndc_conf("server 999.1.1.1 { port 953; };")
    with pytest.raises(InvalidServerAddress):
        parse_rndc_conf('server "not a host" { };')


def test_invalid_default_server():
    with pytest.raises(InvalidServerAddress):
        parse_rndc_conf("options { default-server 10.0.0.300; };")


def test_invalid_entry_in_addresses():
    with pytest.raises(InvalidIpAddress):
        parse_rndc_conf("server localhost { addresses { ns1.example.com; }; };")


def test_port_out_of_range():
    with pytest.raises(ParseError):
        parse_rndc_conf("options { default-port 99999; };")


def test_last_options_block_wins_per_field():
    conf = parse_rndc_conf(
        "options { default-server localhost; default-port 953; };\n"
        "options { default-port 954; };\n"
    )
    assert conf.options == OptionsBlock(default_server="localhost", default_port=954)


def test_duplicate_key_last_wins():
    conf = parse_rndc_conf('key "k" { secret "one"; }; key "k" { secret "two"; };')
    assert conf.keys["k"].secret == "two"


def test_comments_everywhere():
    conf = parse_rndc_conf(
        '/* header */ key # name follows\n "k" { // body\n algorithm /* x */ hmac-sha256; secret "s"; };'
    )
    assert conf.keys["k"].algorithm == "hmac-sha256"


def test_incomplete_conf():
    with pytest.raises(Incomplete):
        parse_rndc_conf('key "k" { algorithm hmac-sha256; secret "s";')


def test_is_truncated():
    assert is_truncated('key "k" {')
    assert is_truncated('include "x')
    assert is_truncated("options { }")
    assert not is_truncated("options { };")
    assert not is_truncated("// only a comment")
