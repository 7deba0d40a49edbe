"""Tests for rendering zone blocks and rndc.conf files."""

import os
from ipaddress import ip_address
from pathlib import Path

import pytest
from namedctl.models import (
    DnsClass,
    ForwarderSpec,
    KeyBlock,
    NotifyMode,
    OptionsBlock,
    PrimarySpec,
    RndcConfFile,
    ServerBlock,
    ZoneConfig,
    ZoneType,
)
from namedctl.parser.extractor import parse_rndc_conf, parse_showzone
from namedctl.renderer import (
    render_key_block,
    render_options_block,
    render_rndc_conf,
    render_server_block,
    render_zone_block,
    render_zone_statement,
)

CONFDATA = os.path.join(os.path.dirname(__file__), "confdata")
SHOWZONE_FIXTURES = ["internal_local.txt", "secondary.txt", "commented.txt"]


def _fixture(*parts):
    with open(os.path.join(CONFDATA, *parts)) as f:
        return f.read()


def _zone(**kwargs):
    return ZoneConfig(zone_name="example.com", zone_type=ZoneType.PRIMARY, **kwargs)


def test_minimal_block():
    assert render_zone_block(_zone()) == "{ type primary; };"


def test_type_then_file_first():
    config = _zone(also_notify=[ip_address("10.0.0.1")], file="/var/cache/bind/example.com.zone")
    assert render_zone_block(config) == (
        '{ type primary; file "/var/cache/bind/example.com.zone"; also-notify { 10.0.0.1; }; };'
    )


def test_empty_list_is_rendered_as_empty_block():
    assert render_zone_block(_zone(allow_transfer=[])) == "{ type primary; allow-transfer { }; };"


def test_allow_update_raw_emitted_verbatim():
    config = _zone(allow_update_raw='{ key "bindy-operator"; };')
    assert render_zone_block(config) == '{ type primary; allow-update { key "bindy-operator"; }; };'


def test_raw_options_after_structured_fields():
    config = _zone(notify=NotifyMode.YES)
    config.set_raw_option("zone-statistics", "full;")
    config.set_raw_option("dialup", "")
    assert render_zone_block(config) == "{ type primary; notify yes; zone-statistics full; dialup; };"


def test_value_formatting():
    config = ZoneConfig(
        zone_name="example.org",
        zone_type=ZoneType.SECONDARY,
        primaries=[PrimarySpec(ip_address("192.0.2.1"), 5353), PrimarySpec(ip_address("2001:db8::1"))],
        forwarders=[ForwarderSpec(ip_address("8.8.8.8"), 853, "dns tls")],
        request_ixfr=False,
        max_transfer_time_in=60,
    )
    assert render_zone_block(config) == (
        "{ type secondary; primaries { 192.0.2.1 port 5353; 2001:db8::1; }; "
        "max-transfer-time-in 60; forwarders { 8.8.8.8 port 853 tls \"dns tls\"; }; "
        "request-ixfr no; };"
    )


def test_zone_statement():
    assert render_zone_statement(_zone()) == 'zone "example.com" { type primary; };'
    hint = ZoneConfig(zone_name=".", zone_type=ZoneType.HINT, dns_class=DnsClass.CH)
    assert render_zone_statement(hint) == 'zone "." CH { type hint; };'


@pytest.mark.parametrize("name", SHOWZONE_FIXTURES)
def test_round_trip(name):
    config = parse_showzone(_fixture("showzone", name))
    assert parse_showzone(render_zone_statement(config)) == config


@pytest.mark.parametrize("name", SHOWZONE_FIXTURES)
def test_render_is_idempotent(name):
    once = render_zone_statement(parse_showzone(_fixture("showzone", name)))
    twice = render_zone_statement(parse_showzone(once))
    assert once == twice


@pytest.mark.parametrize("name", SHOWZONE_FIXTURES)
def test_no_doubled_semicolons(name):
    text = render_zone_block(parse_showzone(_fixture("showzone", name)))
    assert ";;" not in text
    assert "; ;" not in text


def test_unknown_option_rendered_verbatim():
    config = parse_showzone('zone "z" { type primary; custom-option { custom value; }; };')
    assert "custom-option { custom value; };" in render_zone_block(config)


def test_production_example_render():
    config = parse_showzone(_fixture("showzone", "internal_local.txt"))
    assert render_zone_block(config) == (
        '{ type primary; file "/var/cache/bind/internal.local.zone"; '
        "also-notify { 10.244.1.18; 10.244.1.21; }; "
        "allow-transfer { 10.244.1.18; 10.244.1.21; }; "
        'allow-update { key "bindy-operator"; }; };'
    )


def test_quoted_fields_are_escaped():
    config = _zone(file='odd "name".zone')
    assert render_zone_block(config) == r'{ type primary; file "odd \"name\".zone"; };'
    assert parse_showzone(render_zone_statement(config)).file == 'odd "name".zone'


# ---------- rndc.conf ----------

def test_render_key_block():
    assert render_key_block(KeyBlock("rndc-key", "hmac-sha256", "c2VjcmV0")) == (
        'key "rndc-key" {\n'
        "    algorithm hmac-sha256;\n"
        '    secret "c2VjcmV0";\n'
        "};"
    )


def test_render_server_block():
    server = ServerBlock(
        ip_address("127.0.0.1"), key="rndc-key", port=953, addresses=[ip_address("::1")]
    )
    assert render_server_block(server) == (
        "server 127.0.0.1 {\n"
        '    key "rndc-key";\n'
        "    port 953;\n"
        "    addresses {\n"
        "        ::1;\n"
        "    };\n"
        "};"
    )
    assert render_server_block(ServerBlock("localhost")) == "server localhost { };"


def test_render_options_block():
    options = OptionsBlock(default_server="localhost", default_key="k", default_port=953)
    assert render_options_block(options) == (
        "options {\n"
        "    default-server localhost;\n"
        '    default-key "k";\n'
        "    default-port 953;\n"
        "};"
    )


def test_rndc_conf_round_trip():
    conf = parse_rndc_conf(_fixture("rndc", "rndc.key") + _fixture("rndc", "rndc.conf"))
    text = render_rndc_conf(conf)
    assert text.startswith('include "rndc.key";')
    assert parse_rndc_conf(text) == conf


def test_render_without_includes():
    conf = RndcConfFile(keys={"k": KeyBlock("k", "hmac-sha256", "s")}, includes=[Path("other.conf")])
    assert "include" not in render_rndc_conf(conf, includes=False)
    assert render_rndc_conf(conf).startswith('include "other.conf";')
    assert render_rndc_conf(RndcConfFile()) == ""
