"""Lexical primitives shared by the zone-block and rndc.conf grammars.

Both grammars are comment tolerant everywhere; ``comment`` is attached
with ``.ignore()`` on the top-level expressions, which pyparsing
propagates to every element below.
"""

from __future__ import annotations

import re
from ipaddress import ip_address

import pyparsing as pp

from ..errors import InvalidIpAddress, ParseError
from ..models import PrimarySpec

pp.ParserElement.enable_packrat()

IDENT_CHARS = pp.alphanums + "_-"

# Comments: //, /* */, #
comment = pp.cpp_style_comment | pp.python_style_comment

SEMI = pp.Suppress(pp.Literal(";"))
LBRACE = pp.Suppress(pp.Literal("{"))
RBRACE = pp.Suppress(pp.Literal("}"))

_ESCAPE = re.compile(r"\\([0-7]{1,3}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}


def _unescape(body: str) -> str:
    def repl(m):
        ch = m.group(1)
        if ch[0] in "01234567":
            return chr(int(ch, 8))
        return _SIMPLE_ESCAPES.get(ch, ch)

    return _ESCAPE.sub(repl, body)


def quote(value: str) -> str:
    """Render ``value`` as a double-quoted literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


quoted_string = (
    pp.Regex(r'"(?:[^"\\]|\\.)*"', flags=re.DOTALL)
    .set_parse_action(lambda t: _unescape(t[0][1:-1]))
    .set_name("quoted string")
)

identifier = pp.Regex(r"[A-Za-z0-9_-]+").set_name("identifier")

integer = pp.Regex(r"\d+").set_parse_action(lambda t: int(t[0])).set_name("integer")


def keyword(*names: str) -> pp.ParserElement:
    """Match any of ``names`` as a whole word (hyphens count as word chars)."""
    expr = pp.MatchFirst([pp.Keyword(n, ident_chars=IDENT_CHARS) for n in names])
    return expr.set_name(" | ".join(names))


# ---------- addresses ----------

_IP_PATTERN = r"(?:[0-9A-Fa-f]{0,4}:[0-9A-Fa-f:.]*|\d{1,3}(?:\.\d{1,3}){3})(?:/\d{1,3})?"


def _to_ip_address(s, loc, t):
    text = t[0].split("/", 1)[0]
    try:
        return ip_address(text)
    except ValueError:
        raise pp.ParseException(s, loc, f"invalid IP address {t[0]!r}")


# The /prefix suffix is recognised and dropped; the model only stores addresses.
ip_addr = pp.Regex(_IP_PATTERN).set_parse_action(_to_ip_address).set_name("IP address")


def _check_port(s, loc, t):
    if t[0] > 65535:
        raise pp.ParseException(s, loc, f"port out of range: {t[0]}")
    return t[0]


port_number = integer.copy().add_parse_action(_check_port).set_name("port number")
port_clause = keyword("port").suppress() + port_number

ip_with_port = (ip_addr + pp.Optional(port_clause)).set_parse_action(
    lambda t: PrimarySpec(t[0], t[1] if len(t) > 1 else None)
)

# ---------- raw text capture ----------

_bare_token = pp.Regex(r'(?:[^\s;{}"/#]|/(?![/*]))+')
# Comments and strings inside a block may contain unbalanced braces.
nested_block = pp.nested_expr("{", "}", ignore_expr=comment | pp.dbl_quoted_string.copy())
raw_value = pp.original_text_for(
    pp.ZeroOrMore(nested_block | pp.dbl_quoted_string.copy() | _bare_token)
).add_parse_action(lambda t: normalize_raw(t[0]))

_RAW_PIECES = re.compile(
    r'("(?:[^"\\]|\\.)*")|((?:\s|/\*.*?\*/|//[^\n]*|#[^\n]*)+)',
    re.DOTALL,
)


def normalize_raw(text: str) -> str:
    """Strip comments and collapse whitespace outside quoted strings."""
    return _RAW_PIECES.sub(lambda m: m.group(1) or " ", text).strip()


# ---------- standalone helpers ----------

_IGNORABLE = re.compile(r"(?:\s+|//[^\n]*|#[^\n]*|/\*.*?\*/)*", re.DOTALL)


def skip_ignorable(text: str, loc: int = 0) -> int:
    """Return the index of the first character after whitespace and comments."""
    return _IGNORABLE.match(text, loc).end()


def _parse_whole(expr: pp.ParserElement, text: str, error=ParseError):
    expr = expr.copy().ignore(comment)
    try:
        return expr.parse_string(text, parse_all=True)[0]
    except pp.ParseException as exc:
        raise error(
            f"expected {expr.name}: {exc.msg}",
            expected=expr.name,
            remaining=text[exc.loc:exc.loc + 40],
        ) from exc


def parse_quoted_string(text: str) -> str:
    return _parse_whole(quoted_string, text)


def parse_identifier(text: str) -> str:
    return _parse_whole(identifier, text)


def parse_ip_addr(text: str):
    return _parse_whole(ip_addr, text, InvalidIpAddress)


def parse_ip_with_port(text: str) -> PrimarySpec:
    return _parse_whole(ip_with_port.copy().set_name("address [port n]"), text, InvalidIpAddress)
