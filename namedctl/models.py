from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from ipaddress import IPv4Address, IPv6Address, ip_address
from pathlib import Path

IPAddress = IPv4Address | IPv6Address


class _Token(str, Enum):
    """Enum whose value is the configuration token."""

    @classmethod
    def parse(cls, token: str):
        """Return the member for ``token``, or None if it is not recognised."""
        try:
            return cls(token)
        except ValueError:
            return None


class ZoneType(_Token):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    STUB = "stub"
    FORWARD = "forward"
    HINT = "hint"
    MIRROR = "mirror"
    DELEGATION = "delegation-only"
    REDIRECT = "redirect"

    @classmethod
    def parse(cls, token: str):
        return super().parse(_ZONE_TYPE_ALIASES.get(token, token))


_ZONE_TYPE_ALIASES = {"master": "primary", "slave": "secondary"}


class DnsClass(_Token):
    IN = "IN"
    CH = "CH"
    HS = "HS"

    @classmethod
    def parse(cls, token: str):
        return super().parse(token.upper())


class NotifyMode(_Token):
    YES = "yes"
    NO = "no"
    EXPLICIT = "explicit"
    MASTER_ONLY = "master-only"
    PRIMARY_ONLY = "primary-only"


class ForwardMode(_Token):
    ONLY = "only"
    FIRST = "first"


class AutoDnssecMode(_Token):
    OFF = "off"
    ALLOW = "allow"
    MAINTAIN = "maintain"
    CREATE = "create"


class CheckNamesMode(_Token):
    FAIL = "fail"
    WARN = "warn"
    IGNORE = "ignore"


class MasterfileFormat(_Token):
    TEXT = "text"
    RAW = "raw"
    MAP = "map"


@dataclass
class PrimarySpec:
    address: IPAddress
    port: int | None = None


@dataclass
class ForwarderSpec:
    address: IPAddress
    port: int | None = None
    tls: str | None = None


def _directive(name: str):
    return field(default=None, metadata={"directive": name})


@dataclass
class ZoneConfig:
    """One zone as reported by ``rndc showzone``.

    Structured fields default to None ("not mentioned"). An empty list
    means "present but empty" and is serialized as ``{ }``. Directives
    without a structured field live in ``raw_options`` as keyword -> raw
    value text.

    Assigning a structured field drops any raw entry for the same
    directive, and ``allow_update``/``allow_update_raw`` clear each other.
    """

    zone_name: str
    zone_type: ZoneType
    dns_class: DnsClass = DnsClass.IN

    file: str | None = _directive("file")

    primaries: list[PrimarySpec] | None = _directive("primaries")
    also_notify: list[IPAddress] | None = _directive("also-notify")
    notify: NotifyMode | None = _directive("notify")

    allow_query: list[IPAddress] | None = _directive("allow-query")
    allow_transfer: list[IPAddress] | None = _directive("allow-transfer")
    allow_update: list[IPAddress] | None = _directive("allow-update")
    # Unparsed "{ key ...; };" text; used when allow-update is not a plain address list
    allow_update_raw: str | None = _directive("allow-update")
    allow_update_forwarding: list[IPAddress] | None = _directive("allow-update-forwarding")
    allow_notify: list[IPAddress] | None = _directive("allow-notify")

    max_transfer_time_in: int | None = _directive("max-transfer-time-in")
    max_transfer_time_out: int | None = _directive("max-transfer-time-out")
    max_transfer_idle_in: int | None = _directive("max-transfer-idle-in")
    max_transfer_idle_out: int | None = _directive("max-transfer-idle-out")
    transfer_source: IPAddress | None = _directive("transfer-source")
    transfer_source_v6: IPAddress | None = _directive("transfer-source-v6")
    notify_source: IPAddress | None = _directive("notify-source")
    notify_source_v6: IPAddress | None = _directive("notify-source-v6")

    update_policy: str | None = _directive("update-policy")
    journal: str | None = _directive("journal")
    ixfr_from_differences: bool | None = _directive("ixfr-from-differences")

    inline_signing: bool | None = _directive("inline-signing")
    auto_dnssec: AutoDnssecMode | None = _directive("auto-dnssec")
    key_directory: str | None = _directive("key-directory")
    sig_validity_interval: int | None = _directive("sig-validity-interval")
    dnskey_sig_validity: int | None = _directive("dnskey-sig-validity")

    forward: ForwardMode | None = _directive("forward")
    forwarders: list[ForwarderSpec] | None = _directive("forwarders")

    check_names: CheckNamesMode | None = _directive("check-names")
    check_mx: CheckNamesMode | None = _directive("check-mx")
    check_integrity: bool | None = _directive("check-integrity")
    masterfile_format: MasterfileFormat | None = _directive("masterfile-format")
    max_zone_ttl: int | None = _directive("max-zone-ttl")

    max_refresh_time: int | None = _directive("max-refresh-time")
    min_refresh_time: int | None = _directive("min-refresh-time")
    max_retry_time: int | None = _directive("max-retry-time")
    min_retry_time: int | None = _directive("min-retry-time")

    multi_master: bool | None = _directive("multi-master")
    request_ixfr: bool | None = _directive("request-ixfr")
    request_expire: bool | None = _directive("request-expire")

    raw_options: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        for name, directive in FIELD_DIRECTIVES.items():
            if getattr(self, name) is not None:
                for key in directive_keywords(directive):
                    self.raw_options.pop(key, None)

    def __setattr__(self, name, value):
        if value is not None:
            partner = _EXCLUSIVE_FIELDS.get(name)
            if partner is not None:
                object.__setattr__(self, partner, None)
            directive = FIELD_DIRECTIVES.get(name)
            raw = self.__dict__.get("raw_options")
            if directive is not None and raw:
                for key in directive_keywords(directive):
                    raw.pop(key, None)
        object.__setattr__(self, name, value)

    def set_raw_option(self, keyword: str, value: str) -> None:
        """Store ``keyword`` verbatim, clearing any structured form of it."""
        if DIRECTIVE_ALIASES.get(keyword, keyword) == "type":
            raise ValueError("the zone type cannot be stored as a raw option")
        self.clear_directive(keyword)
        self.raw_options[keyword] = value

    def clear_directive(self, keyword: str) -> None:
        """Remove ``keyword`` in every form: structured field and raw entry."""
        directive = DIRECTIVE_ALIASES.get(keyword, keyword)
        for name in DIRECTIVE_FIELDS.get(directive, ()):
            object.__setattr__(self, name, None)
        for key in directive_keywords(directive):
            self.raw_options.pop(key, None)

    def to_dict(self) -> dict:
        """JSON-ready view; unset fields are omitted."""
        data = {
            "zone_name": self.zone_name,
            "zone_type": self.zone_type.value,
            "class": self.dns_class.value,
        }
        for name in FIELD_DIRECTIVES:
            value = getattr(self, name)
            if value is not None:
                data[name] = _jsonable(value)
        data["raw_options"] = dict(self.raw_options)
        return data


# Structured field -> directive keyword, in serialization order.
FIELD_DIRECTIVES: dict[str, str] = {
    f.name: f.metadata["directive"] for f in fields(ZoneConfig) if "directive" in f.metadata
}

DIRECTIVE_FIELDS: dict[str, tuple[str, ...]] = {}
for _name, _directive_name in FIELD_DIRECTIVES.items():
    DIRECTIVE_FIELDS[_directive_name] = DIRECTIVE_FIELDS.get(_directive_name, ()) + (_name,)

# Legacy keyword -> current keyword
DIRECTIVE_ALIASES = {"masters": "primaries"}

_EXCLUSIVE_FIELDS = {"allow_update": "allow_update_raw", "allow_update_raw": "allow_update"}


def directive_keywords(directive: str) -> tuple[str, ...]:
    """All keywords that spell ``directive``, legacy aliases included."""
    return (directive,) + tuple(k for k, v in DIRECTIVE_ALIASES.items() if v == directive)


def _jsonable(value):
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (IPv4Address, IPv6Address)):
        return str(value)
    if isinstance(value, (PrimarySpec, ForwarderSpec)):
        return {k: _jsonable(v) for k, v in vars(value).items() if v is not None}
    return value


# ---------- rndc.conf ----------

@dataclass
class KeyBlock:
    name: str
    algorithm: str
    secret: str


@dataclass
class ServerBlock:
    address: IPAddress | str  # IP literal or hostname
    key: str | None = None
    port: int | None = None
    addresses: list[IPAddress] | None = None


@dataclass
class OptionsBlock:
    default_server: str | None = None
    default_key: str | None = None
    default_port: int | None = None

    def is_empty(self) -> bool:
        return self.default_server is None and self.default_key is None and self.default_port is None

    def fill_from(self, other: OptionsBlock) -> None:
        """Copy fields from ``other`` that are not already set here."""
        if self.default_server is None:
            self.default_server = other.default_server
        if self.default_key is None:
            self.default_key = other.default_key
        if self.default_port is None:
            self.default_port = other.default_port


@dataclass
class RndcConfFile:
    keys: dict[str, KeyBlock] = field(default_factory=dict)
    servers: dict[str, ServerBlock] = field(default_factory=dict)
    options: OptionsBlock = field(default_factory=OptionsBlock)
    includes: list[Path] = field(default_factory=list)

    @property
    def default_server(self) -> str | None:
        return self.options.default_server

    def default_key(self) -> KeyBlock | None:
        if self.options.default_key is None:
            return None
        return self.keys.get(self.options.default_key)

    def merge(self, other: RndcConfFile) -> None:
        """Merge an included file; entries already present here win."""
        for name, key in other.keys.items():
            self.keys.setdefault(name, key)
        for address, server in other.servers.items():
            self.servers.setdefault(address, server)
        self.options.fill_from(other.options)


def parse_server_address(text: str) -> IPAddress | str:
    """Return an address object for IP literals, else the hostname string."""
    try:
        return ip_address(text)
    except ValueError:
        return text
