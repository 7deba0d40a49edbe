"""pyparsing grammar for the zone block printed by ``rndc showzone``.

Each known directive has a strict statement parser. A statement the
strict parser does not accept (ACL names, key references, durations,
...) falls through to the catch-all and is kept verbatim, so parsing a
zone never drops configuration.
"""

from __future__ import annotations

from dataclasses import dataclass

import pyparsing as pp

from ..models import (
    AutoDnssecMode,
    CheckNamesMode,
    ForwarderSpec,
    ForwardMode,
    MasterfileFormat,
    NotifyMode,
)
from .lexer import (
    LBRACE,
    RBRACE,
    SEMI,
    comment,
    identifier,
    integer,
    ip_addr,
    ip_with_port,
    keyword,
    nested_block,
    normalize_raw,
    port_number,
    quoted_string,
    raw_value,
)


@dataclass
class Statement:
    """One statement of a zone block.

    ``field`` is the ZoneConfig attribute the value belongs to, or None
    when the statement is a raw option stored under ``keyword``.
    """

    keyword: str
    field: str | None
    value: object


def _first(values):
    return values[0]


def _statement(keywords, field: str, value_expr, convert=_first):
    """keyword value ; -> Statement(keyword, field, convert(values))"""
    if isinstance(keywords, str):
        keywords = (keywords,)
    expr = keyword(*keywords) + value_expr + SEMI
    return expr.set_parse_action(lambda t: Statement(t[0], field, convert(t[1:])))


def _enum(cls):
    return keyword(*[m.value for m in cls]).set_parse_action(lambda t: cls(t[0]))


# ---------- values ----------

boolean = keyword("yes", "no", "true", "false", "1", "0").set_parse_action(
    lambda t: t[0] in ("yes", "true", "1")
)

ip_list = LBRACE + pp.ZeroOrMore(ip_addr + SEMI) + RBRACE
primary_list = LBRACE + pp.ZeroOrMore(ip_with_port + SEMI) + RBRACE


def _to_forwarder(t):
    options = dict(zip(t[1::2], t[2::2]))
    return ForwarderSpec(t[0], options.get("port"), options.get("tls"))


forwarder = (
    ip_addr
    + pp.Optional(keyword("port") + port_number)
    + pp.Optional(keyword("tls") + (quoted_string | identifier))
).set_parse_action(_to_forwarder)
forwarder_list = LBRACE + pp.ZeroOrMore(forwarder + SEMI) + RBRACE

# ---------- zone statements ----------

zone_type_stmt = _statement("type", "zone_type", identifier)

file_stmt = _statement("file", "file", quoted_string)

primaries_stmt = _statement(("primaries", "masters"), "primaries", primary_list, list)
also_notify_stmt = _statement("also-notify", "also_notify", ip_list, list)
notify_stmt = _statement("notify", "notify", _enum(NotifyMode))

allow_query_stmt = _statement("allow-query", "allow_query", ip_list, list)
allow_transfer_stmt = _statement("allow-transfer", "allow_transfer", ip_list, list)
allow_update_stmt = _statement("allow-update", "allow_update", ip_list, list)
# Key references and ACL names are kept as the unparsed block text.
allow_update_raw_stmt = (
    keyword("allow-update") + pp.original_text_for(nested_block) + SEMI
).set_parse_action(lambda t: Statement(t[0], "allow_update_raw", normalize_raw(t[1]) + ";"))
allow_update_forwarding_stmt = _statement(
    "allow-update-forwarding", "allow_update_forwarding", ip_list, list
)
allow_notify_stmt = _statement("allow-notify", "allow_notify", ip_list, list)

max_transfer_time_in_stmt = _statement("max-transfer-time-in", "max_transfer_time_in", integer)
max_transfer_time_out_stmt = _statement("max-transfer-time-out", "max_transfer_time_out", integer)
max_transfer_idle_in_stmt = _statement("max-transfer-idle-in", "max_transfer_idle_in", integer)
max_transfer_idle_out_stmt = _statement("max-transfer-idle-out", "max_transfer_idle_out", integer)
transfer_source_stmt = _statement("transfer-source", "transfer_source", ip_addr)
transfer_source_v6_stmt = _statement("transfer-source-v6", "transfer_source_v6", ip_addr)
notify_source_stmt = _statement("notify-source", "notify_source", ip_addr)
notify_source_v6_stmt = _statement("notify-source-v6", "notify_source_v6", ip_addr)

update_policy_stmt = _statement("update-policy", "update_policy", raw_value)
journal_stmt = _statement("journal", "journal", quoted_string)
ixfr_from_differences_stmt = _statement("ixfr-from-differences", "ixfr_from_differences", boolean)

inline_signing_stmt = _statement("inline-signing", "inline_signing", boolean)
auto_dnssec_stmt = _statement("auto-dnssec", "auto_dnssec", _enum(AutoDnssecMode))
key_directory_stmt = _statement("key-directory", "key_directory", quoted_string)
sig_validity_interval_stmt = _statement("sig-validity-interval", "sig_validity_interval", integer)
dnskey_sig_validity_stmt = _statement("dnskey-sig-validity", "dnskey_sig_validity", integer)

forward_stmt = _statement("forward", "forward", _enum(ForwardMode))
forwarders_stmt = _statement("forwarders", "forwarders", forwarder_list, list)

check_names_stmt = _statement("check-names", "check_names", _enum(CheckNamesMode))
check_mx_stmt = _statement("check-mx", "check_mx", _enum(CheckNamesMode))
check_integrity_stmt = _statement("check-integrity", "check_integrity", boolean)
masterfile_format_stmt = _statement("masterfile-format", "masterfile_format", _enum(MasterfileFormat))
max_zone_ttl_stmt = _statement("max-zone-ttl", "max_zone_ttl", integer)

max_refresh_time_stmt = _statement("max-refresh-time", "max_refresh_time", integer)
min_refresh_time_stmt = _statement("min-refresh-time", "min_refresh_time", integer)
max_retry_time_stmt = _statement("max-retry-time", "max_retry_time", integer)
min_retry_time_stmt = _statement("min-retry-time", "min_retry_time", integer)

multi_master_stmt = _statement("multi-master", "multi_master", boolean)
request_ixfr_stmt = _statement("request-ixfr", "request_ixfr", boolean)
request_expire_stmt = _statement("request-expire", "request_expire", boolean)

# Catch-all: keyword <anything, balanced braces> ;
# ``type`` is excluded so a malformed type statement is an error, not a raw option.
unknown_stmt = (~keyword("type") + identifier + raw_value + SEMI).set_parse_action(
    lambda t: Statement(t[0], None, t[1])
)

zone_body_stmt = (
    zone_type_stmt
    | file_stmt
    | primaries_stmt
    | also_notify_stmt
    | notify_stmt
    | allow_query_stmt
    | allow_transfer_stmt
    | allow_update_stmt
    | allow_update_raw_stmt
    | allow_update_forwarding_stmt
    | allow_notify_stmt
    | max_transfer_time_in_stmt
    | max_transfer_time_out_stmt
    | max_transfer_idle_in_stmt
    | max_transfer_idle_out_stmt
    | transfer_source_stmt
    | transfer_source_v6_stmt
    | notify_source_stmt
    | notify_source_v6_stmt
    | update_policy_stmt
    | journal_stmt
    | ixfr_from_differences_stmt
    | inline_signing_stmt
    | auto_dnssec_stmt
    | key_directory_stmt
    | sig_validity_interval_stmt
    | dnskey_sig_validity_stmt
    | forward_stmt
    | forwarders_stmt
    | check_names_stmt
    | check_mx_stmt
    | check_integrity_stmt
    | masterfile_format_stmt
    | max_zone_ttl_stmt
    | max_refresh_time_stmt
    | min_refresh_time_stmt
    | max_retry_time_stmt
    | min_retry_time_stmt
    | multi_master_stmt
    | request_ixfr_stmt
    | request_expire_stmt
    | unknown_stmt
)

# ---------- zone block ----------

zone_name = quoted_string | pp.Regex(r"[A-Za-z0-9_.-]+")

zone_block = (
    keyword("zone").suppress()
    + zone_name("zone_name")
    + pp.Optional(identifier("zone_class"))
    + LBRACE
    + pp.Group(pp.ZeroOrMore(zone_body_stmt))("statements")
    + RBRACE
    + SEMI
)
zone_block.ignore(comment)


def parse_zone_block(text: str) -> pp.ParseResults:
    """Parse ``zone "name" [class] { ... };`` and return the raw results."""
    return zone_block.parse_string(text, parse_all=True)
