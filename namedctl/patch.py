"""Sparse zone updates and the showzone -> modzone workflow.

The read-modify-write cycle against named is not transactional, so every
mutation of a zone runs under that zone's lock from the moment its
configuration is fetched until the new one has been submitted.
"""

from __future__ import annotations

import logging
import re
import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass, field

from .errors import InvalidIpAddress
from .models import FIELD_DIRECTIVES, NotifyMode, PrimarySpec, ZoneConfig, ZoneType
from .parser.extractor import parse_showzone
from .parser.lexer import parse_ip_addr, parse_ip_with_port
from .renderer import render_zone_block

log = logging.getLogger(__name__)

# Request key -> ZoneConfig field. snake_case spellings are accepted too.
PATCH_FIELDS = {
    "alsoNotify": "also_notify",
    "allowTransfer": "allow_transfer",
    "allowUpdate": "allow_update",
    "allowQuery": "allow_query",
    "allowNotify": "allow_notify",
    "allowUpdateForwarding": "allow_update_forwarding",
    "primaries": "primaries",
    "notify": "notify",
}
PATCH_FIELDS.update({name: name for name in list(PATCH_FIELDS.values())})

_PREFIX = re.compile(r"/(\d+)")


@dataclass
class ZonePatch:
    """Field overrides for one zone.

    ``changes`` maps a ZoneConfig field to its new value. None means the
    directive is removed; an empty list means it is kept but empty.
    """

    changes: dict[str, object] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data, allow_empty: bool = False) -> ZonePatch:
        if not isinstance(data, dict):
            raise ValueError("patch must be a JSON object")
        changes = {}
        for key, value in data.items():
            name = PATCH_FIELDS.get(key)
            if name is None:
                raise ValueError(f"unsupported field: {key}")
            changes[name] = _convert(name, value)
        if not changes and not allow_empty:
            raise ValueError("patch does not change anything")
        return cls(changes)

    def __bool__(self) -> bool:
        return bool(self.changes)


def _convert(name: str, value):
    if value is None:
        return None

    if name == "notify":
        if isinstance(value, bool):
            return NotifyMode.YES if value else NotifyMode.NO
        mode = NotifyMode.parse(value) if isinstance(value, str) else None
        if mode is None:
            raise ValueError(f"invalid notify mode: {value!r}")
        return mode

    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{name} must be a list of address strings")
    if name == "primaries":
        return [_host(v, parse_ip_with_port) for v in value]
    return [_host(v, parse_ip_addr) for v in value]


def _host(text: str, parse):
    """Parse one request address; a prefix is only allowed at full length."""
    parsed = parse(text)
    address = parsed.address if isinstance(parsed, PrimarySpec) else parsed
    match = _PREFIX.search(text)
    if match and int(match.group(1)) != address.max_prefixlen:
        raise InvalidIpAddress(
            f"{text!r} is a network, expected a single address",
            expected="IP address",
            remaining=text,
        )
    return parsed


def apply_patch(config: ZoneConfig, patch: ZonePatch) -> ZoneConfig:
    """Overwrite the patched fields of ``config``; nothing else is touched."""
    for name, value in patch.changes.items():
        if value is None:
            config.clear_directive(FIELD_DIRECTIVES[name])
        else:
            setattr(config, name, value)
    return config


class ZoneLocks:
    """One lock per zone name; different zones never wait on each other.

    Entries are weak, so a zone's lock is dropped once nobody holds or
    waits on it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        return len(self._locks)

    @staticmethod
    def key(zone: str) -> str:
        return zone.rstrip(".").lower()

    def lock_for(self, zone: str) -> threading.Lock:
        key = self.key(zone)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, zone: str):
        with self.lock_for(zone):
            yield


def modify_zone(executor, locks: ZoneLocks, zone: str, patch: ZonePatch) -> ZoneConfig:
    """Fetch, patch and resubmit a zone's configuration."""
    with locks.hold(zone):
        config = parse_showzone(executor.showzone(zone))
        apply_patch(config, patch)
        executor.modzone(zone, render_zone_block(config), dns_class=config.dns_class)
    log.info("Modified zone %s: %s", zone, ", ".join(patch.changes))
    return config


def add_zone(
    executor,
    locks: ZoneLocks,
    zone: str,
    zone_type: str,
    settings: ZonePatch | None = None,
    file: str | None = None,
) -> ZoneConfig:
    """Create a zone from scratch with ``rndc addzone``."""
    parsed_type = ZoneType.parse(zone_type)
    if parsed_type is None:
        raise ValueError(f"invalid zone type: {zone_type}")

    config = ZoneConfig(zone_name=zone.rstrip("."), zone_type=parsed_type, file=file)
    if settings:
        apply_patch(config, settings)

    with locks.hold(zone):
        executor.addzone(zone, render_zone_block(config))
    log.info("Added %s zone %s", parsed_type.value, zone)
    return config


def delete_zone(executor, locks: ZoneLocks, zone: str, clean: bool = False) -> None:
    with locks.hold(zone):
        executor.delzone(zone, clean=clean)
    log.info("Deleted zone %s", zone)
