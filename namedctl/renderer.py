"""Render zone configurations and rndc.conf models back to BIND syntax."""

from __future__ import annotations

import re
from enum import Enum

from .models import (
    DnsClass,
    FIELD_DIRECTIVES,
    ForwarderSpec,
    KeyBlock,
    OptionsBlock,
    PrimarySpec,
    RndcConfFile,
    ServerBlock,
    ZoneConfig,
)
from .parser.lexer import quote

# Fields whose value is a path and must be written as a string literal
QUOTED_FIELDS = {"file", "journal", "key_directory"}

# Fields holding captured text that is emitted as-is
VERBATIM_FIELDS = {"update_policy", "allow_update_raw"}

_BARE = re.compile(r"[A-Za-z0-9_.-]+")


def render_zone_block(config: ZoneConfig) -> str:
    """Render ``{ type ...; ...; };``, the payload of addzone/modzone.

    ``type`` comes first, then the structured fields in their declared
    order, then raw options in insertion order.
    """
    parts = [f"type {config.zone_type.value}"]

    for name, directive in FIELD_DIRECTIVES.items():
        value = getattr(config, name)
        if value is None:
            continue
        if name in VERBATIM_FIELDS:
            parts.append(_keyword_value(directive, _strip_terminator(value)))
        elif name in QUOTED_FIELDS:
            parts.append(f"{directive} {quote(value)}")
        else:
            parts.append(f"{directive} {render_value(value)}")

    for keyword, value in config.raw_options.items():
        parts.append(_keyword_value(keyword, _strip_terminator(value)))

    return "{ " + "; ".join(parts) + "; };"


def render_zone_statement(config: ZoneConfig) -> str:
    """Render a complete ``zone "name" [class] { ... };`` statement."""
    header = f"zone {quote(config.zone_name)}"
    if config.dns_class is not DnsClass.IN:
        header += f" {config.dns_class.value}"
    return f"{header} {render_zone_block(config)}"


def render_value(value) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return "{ " + "".join(f"{render_value(item)}; " for item in value) + "}"
    if isinstance(value, PrimarySpec):
        return _with_port(value.address, value.port)
    if isinstance(value, ForwarderSpec):
        text = _with_port(value.address, value.port)
        if value.tls is not None:
            text += f" tls {_name(value.tls)}"
        return text
    return str(value)


def _with_port(address, port) -> str:
    if port is None:
        return str(address)
    return f"{address} port {port}"


def _name(value: str) -> str:
    return value if _BARE.fullmatch(value) else quote(value)


def _keyword_value(keyword: str, value: str) -> str:
    return f"{keyword} {value}" if value else keyword


def _strip_terminator(value: str) -> str:
    # The block separator adds the ';'; a captured one would double it
    value = value.strip()
    while value.endswith(";"):
        value = value[:-1].rstrip()
    return value


# ---------- rndc.conf ----------

def render_key_block(key: KeyBlock) -> str:
    return (
        f"key {quote(key.name)} {{\n"
        f"    algorithm {key.algorithm};\n"
        f"    secret {quote(key.secret)};\n"
        "};"
    )


def render_server_block(server: ServerBlock) -> str:
    lines = []
    if server.key is not None:
        lines.append(f"    key {quote(server.key)};")
    if server.port is not None:
        lines.append(f"    port {server.port};")
    if server.addresses is not None:
        lines.append("    addresses {")
        lines.extend(f"        {address};" for address in server.addresses)
        lines.append("    };")
    return _block(f"server {server.address}", lines)


def render_options_block(options: OptionsBlock) -> str:
    lines = []
    if options.default_server is not None:
        lines.append(f"    default-server {options.default_server};")
    if options.default_key is not None:
        lines.append(f"    default-key {quote(options.default_key)};")
    if options.default_port is not None:
        lines.append(f"    default-port {options.default_port};")
    return _block("options", lines)


def _block(header: str, lines: list[str]) -> str:
    if not lines:
        return f"{header} {{ }};"
    return f"{header} {{\n" + "\n".join(lines) + "\n};"


def render_rndc_conf(conf: RndcConfFile, includes: bool = True) -> str:
    """Render a complete rndc.conf.

    With ``includes=False`` the include statements are left out, which
    is what you want when writing out a merged configuration.
    """
    sections = []
    if includes and conf.includes:
        sections.append("\n".join(f"include {quote(str(path))};" for path in conf.includes))
    sections.extend(render_key_block(key) for key in conf.keys.values())
    sections.extend(render_server_block(server) for server in conf.servers.values())
    if not conf.options.is_empty():
        sections.append(render_options_block(conf.options))
    return "\n\n".join(sections) + "\n" if sections else ""
