"""Loading rndc.conf files from disk, following include statements."""

from __future__ import annotations

from pathlib import Path

from ..errors import CircularInclude, FileNotFound, IoError
from ..models import RndcConfFile
from .extractor import parse_rndc_conf

# Searched in order when no path is configured
DEFAULT_RNDC_CONF_PATHS = ("/etc/bind/rndc.conf", "/etc/rndc.conf")


def find_rndc_conf(candidates=DEFAULT_RNDC_CONF_PATHS) -> Path | None:
    """Return the first existing rndc.conf among ``candidates``."""
    for candidate in candidates:
        path = Path(candidate)
        if path.is_file():
            return path
    return None


def load_rndc_conf(path: str | Path) -> RndcConfFile:
    """Parse ``path`` and every file it includes into one RndcConfFile.

    Relative include paths resolve against the including file's
    directory. Definitions in the including file take precedence over
    those pulled in by its includes. A file may be included more than
    once along different branches; only a file that includes itself,
    directly or indirectly, is an error.
    """
    return _load(Path(path), stack=[])


def _load(path: Path, stack: list[Path]) -> RndcConfFile:
    real = _resolve(path)
    if real in stack:
        chain = " -> ".join(str(p) for p in stack + [real])
        raise CircularInclude(f"circular include: {chain}", expected="include", remaining=str(path))

    try:
        text = real.read_text()
    except OSError as exc:
        raise IoError(f"cannot read {real}: {exc.strerror or exc}", remaining=str(real)) from exc

    conf = parse_rndc_conf(text)

    stack.append(real)
    try:
        for index, include in enumerate(conf.includes):
            if not include.is_absolute():
                include = real.parent / include
            included = _load(include, stack)
            conf.merge(included)
            conf.includes[index] = _resolve(include)
    finally:
        stack.pop()
    return conf


def _resolve(path: Path) -> Path:
    try:
        return path.resolve(strict=True)
    except FileNotFoundError as exc:
        raise FileNotFound(f"file not found: {path}", remaining=str(path)) from exc
    except OSError as exc:
        raise IoError(f"cannot access {path}: {exc.strerror or exc}", remaining=str(path)) from exc
