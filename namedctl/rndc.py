"""Running rndc commands."""

from __future__ import annotations

import logging
import subprocess

from .config import AppConfig
from .errors import RndcError
from .models import DnsClass

log = logging.getLogger(__name__)


class RndcExecutor:
    """Thin wrapper around the rndc binary."""

    def __init__(self, config: AppConfig):
        self.config = config

    def base_command(self) -> list[str]:
        cmd = [self.config.rndc_bin]
        if self.config.rndc_conf is not None:
            cmd += ["-c", str(self.config.rndc_conf)]
        if self.config.rndc_server:
            cmd += ["-s", self.config.rndc_server]
        if self.config.rndc_port is not None:
            cmd += ["-p", str(self.config.rndc_port)]
        if self.config.rndc_key:
            cmd += ["-y", self.config.rndc_key]
        return cmd

    def execute(self, command: str, *args: str, payload: str | None = None) -> str:
        """Run ``rndc command args... [payload]`` and return its output.

        The payload (a zone configuration block) is passed as the last
        argument, which is how addzone and modzone expect it.
        """
        cmd = self.base_command() + [command, *args]
        if payload is not None:
            cmd.append(payload)
        log.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.rndc_timeout,
            )
        except FileNotFoundError:
            raise RndcError(command, f"no rndc binary at {self.config.rndc_bin}") from None
        except subprocess.TimeoutExpired:
            raise RndcError(command, f"timed out after {self.config.rndc_timeout}s") from None

        output = (result.stdout or "") + (result.stderr or "")
        if result.returncode != 0:
            log.warning("rndc %s exited with %d: %s", command, result.returncode, output.strip())
            raise RndcError(command, output.strip() or f"exit status {result.returncode}")
        return result.stdout

    def status(self) -> str:
        return self.execute("status")

    def showzone(self, zone: str) -> str:
        return self.execute("showzone", zone)

    def addzone(self, zone: str, block: str, dns_class: DnsClass = DnsClass.IN) -> str:
        return self.execute("addzone", *_zone_args(zone, dns_class), payload=block)

    def modzone(self, zone: str, block: str, dns_class: DnsClass = DnsClass.IN) -> str:
        return self.execute("modzone", *_zone_args(zone, dns_class), payload=block)

    def delzone(self, zone: str, clean: bool = False) -> str:
        if clean:
            return self.execute("delzone", "-clean", zone)
        return self.execute("delzone", zone)

    def reload(self, zone: str) -> str:
        return self.execute("reload", zone)

    def zonestatus(self, zone: str) -> str:
        return self.execute("zonestatus", zone)

    def freeze(self, zone: str) -> str:
        return self.execute("freeze", zone)

    def thaw(self, zone: str) -> str:
        return self.execute("thaw", zone)

    def notify(self, zone: str) -> str:
        return self.execute("notify", zone)

    def retransfer(self, zone: str) -> str:
        return self.execute("retransfer", zone)


def _zone_args(zone: str, dns_class: DnsClass) -> list[str]:
    if dns_class is DnsClass.IN:
        return [zone]
    return [zone, dns_class.value]
