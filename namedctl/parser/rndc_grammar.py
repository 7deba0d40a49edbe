"""pyparsing grammar for rndc.conf files.

Top-level statements are include, key, server and options. Unknown
fields inside those blocks are skipped; unknown top-level statements
are a syntax error.
"""

from __future__ import annotations

import pyparsing as pp

from .lexer import LBRACE, RBRACE, SEMI, comment, identifier, integer, keyword, quoted_string, raw_value

name_token = quoted_string | pp.Regex(r"[A-Za-z0-9_.:-]+")
addr_token = quoted_string | pp.Regex(r'[^\s;{}"]+')

# Skipped: name <anything, balanced braces> ;
unknown_field = (identifier + raw_value + SEMI).suppress()

# ---------- key ----------

algorithm_field = keyword("algorithm").suppress() + name_token("algorithm") + SEMI
secret_field = keyword("secret").suppress() + quoted_string("secret") + SEMI

key_stmt = pp.Group(
    keyword("key").suppress()
    + name_token("name")
    + LBRACE
    + pp.ZeroOrMore(algorithm_field | secret_field | unknown_field)
    + RBRACE
    + SEMI
)("key*")

# ---------- server ----------

server_key_field = keyword("key").suppress() + name_token("key") + SEMI
server_port_field = keyword("port").suppress() + integer("port") + SEMI
address_entry = addr_token + pp.Optional(keyword("port") + integer).suppress()
server_addresses_field = (
    keyword("addresses").suppress()
    + LBRACE
    + pp.Group(pp.ZeroOrMore(address_entry + SEMI))("addresses")
    + RBRACE
    + SEMI
)

server_stmt = pp.Group(
    keyword("server").suppress()
    + name_token("address")
    + LBRACE
    + pp.ZeroOrMore(server_key_field | server_port_field | server_addresses_field | unknown_field)
    + RBRACE
    + SEMI
)("server*")

# ---------- options ----------

default_server_field = keyword("default-server").suppress() + name_token("default_server") + SEMI
default_key_field = keyword("default-key").suppress() + name_token("default_key") + SEMI
default_port_field = keyword("default-port").suppress() + integer("default_port") + SEMI

options_stmt = pp.Group(
    keyword("options").suppress()
    + LBRACE
    + pp.ZeroOrMore(default_server_field | default_key_field | default_port_field | unknown_field)
    + RBRACE
    + SEMI
)("options*")

# ---------- include ----------

include_stmt = pp.Group(keyword("include").suppress() + quoted_string("path") + SEMI)("include*")

# ---------- top-level ----------

rndc_conf = pp.ZeroOrMore(include_stmt | key_stmt | server_stmt | options_stmt)
rndc_conf.ignore(comment)


def parse_rndc_conf_text(text: str) -> pp.ParseResults:
    """Parse one rndc.conf fragment and return the raw results."""
    return rndc_conf.parse_string(text, parse_all=True)
