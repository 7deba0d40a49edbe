"""Build ZoneConfig and RndcConfFile objects from parse results."""

from __future__ import annotations

import re
from ipaddress import ip_address
from pathlib import Path

import pyparsing as pp

from ..errors import (
    Incomplete,
    InvalidDnsClass,
    InvalidIpAddress,
    InvalidServerAddress,
    InvalidZoneType,
    MissingField,
    ParseError,
)
from ..models import (
    DnsClass,
    KeyBlock,
    OptionsBlock,
    RndcConfFile,
    ServerBlock,
    ZoneConfig,
    ZoneType,
    parse_server_address,
)
from .grammar import parse_zone_block
from .lexer import normalize_raw
from .rndc_grammar import parse_rndc_conf_text

DEFAULT_ALGORITHM = "hmac-sha256"

_QUOTED = re.compile(r'"(?:[^"\\]|\\.)*"', re.DOTALL)


def parse_showzone(text: str) -> ZoneConfig:
    """Parse the output of ``rndc showzone`` into a ZoneConfig."""
    text = text.strip()
    try:
        results = parse_zone_block(text)
    except pp.ParseException as exc:
        raise _syntax_error(exc, text) from exc
    return _extract_zone(results)


def _extract_zone(results) -> ZoneConfig:
    zone_name = results["zone_name"]

    dns_class = DnsClass.IN
    class_token = results.get("zone_class")
    if class_token is not None:
        dns_class = DnsClass.parse(class_token)
        if dns_class is None:
            raise InvalidDnsClass(
                f"invalid DNS class {class_token!r}", expected="IN | CH | HS", remaining=class_token
            )

    statements = list(results.get("statements", []))
    type_tokens = [s.value for s in statements if s.field == "zone_type"]
    if not type_tokens:
        raise MissingField(f"zone {zone_name!r} has no type statement", expected="type")
    zone_type = ZoneType.parse(type_tokens[-1])
    if zone_type is None:
        raise InvalidZoneType(
            f"invalid zone type {type_tokens[-1]!r}",
            expected=" | ".join(t.value for t in ZoneType),
            remaining=type_tokens[-1],
        )

    config = ZoneConfig(zone_name=zone_name, zone_type=zone_type, dns_class=dns_class)
    for stmt in statements:
        if stmt.field == "zone_type":
            continue
        if stmt.field is None:
            config.set_raw_option(stmt.keyword, stmt.value)
        else:
            setattr(config, stmt.field, stmt.value)
    return config


def parse_rndc_conf(text: str) -> RndcConfFile:
    """Parse a single rndc.conf fragment; includes are listed, not followed."""
    try:
        results = parse_rndc_conf_text(text)
    except pp.ParseException as exc:
        raise _syntax_error(exc, text) from exc

    conf = RndcConfFile()
    for item in results:
        name = item.get_name()

        if name == "include":
            conf.includes.append(Path(item["path"]))

        elif name == "key":
            key = _extract_key(item)
            conf.keys[key.name] = key

        elif name == "server":
            server = _extract_server(item)
            conf.servers[str(server.address)] = server

        elif name == "options":
            # Later options blocks override earlier ones field by field
            options = _extract_options(item)
            options.fill_from(conf.options)
            conf.options = options
    return conf


def _extract_key(item) -> KeyBlock:
    name = item["name"]
    secret = item.get("secret")
    if secret is None:
        raise MissingField(f"key {name!r} has no secret", expected="secret")
    return KeyBlock(name=name, algorithm=item.get("algorithm", DEFAULT_ALGORITHM), secret=secret)


def _extract_server(item) -> ServerBlock:
    token = item["address"]
    addresses = item.get("addresses")
    return ServerBlock(
        address=_server_address(token),
        key=item.get("key"),
        port=_port(item.get("port")),
        addresses=None if addresses is None else [_address_entry(a) for a in addresses],
    )


def _extract_options(item) -> OptionsBlock:
    default_server = item.get("default_server")
    if default_server is not None:
        _server_address(default_server)
    return OptionsBlock(
        default_server=default_server,
        default_key=item.get("default_key"),
        default_port=_port(item.get("default_port")),
    )


def _server_address(token: str):
    """Validate a server name: IP literals must parse, hostnames must be DNS names."""
    looks_like_ip = ":" in token or re.fullmatch(r"[\d.]+", token) is not None
    if looks_like_ip:
        try:
            return ip_address(token)
        except ValueError:
            raise InvalidServerAddress(
                f"invalid server address {token!r}", expected="IP address", remaining=token
            ) from None
    if not re.fullmatch(r"[A-Za-z0-9_-]+(?:\.[A-Za-z0-9_-]+)*\.?", token):
        raise InvalidServerAddress(
            f"invalid server name {token!r}", expected="hostname", remaining=token
        )
    return parse_server_address(token)


def _address_entry(token: str):
    try:
        return ip_address(token.split("/", 1)[0])
    except ValueError:
        raise InvalidIpAddress(
            f"invalid address {token!r} in addresses list", expected="IP address", remaining=token
        ) from None


def _port(value: int | None) -> int | None:
    if value is not None and value > 65535:
        raise ParseError(f"port out of range: {value}", expected="port number", remaining=str(value))
    return value


# ---------- error translation ----------

def _syntax_error(exc: pp.ParseException, text: str) -> ParseError:
    remaining = text[exc.loc:exc.loc + 40]
    if not text[exc.loc:].strip() or is_truncated(text):
        return Incomplete("input ended in the middle of a statement", expected=exc.msg, remaining=remaining)
    return ParseError(
        f"syntax error at line {exc.lineno}, column {exc.col}: {exc.msg}",
        expected=exc.msg,
        remaining=remaining,
    )


def is_truncated(text: str) -> bool:
    """True if ``text`` stops inside a string, a block or a statement."""
    body = _QUOTED.sub('""', normalize_raw(text))
    if body.replace('""', "").count('"'):
        return True
    if not body:
        return False
    return body.count("{") > body.count("}") or not body.endswith(";")
