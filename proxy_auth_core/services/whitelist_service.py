"""
IP allow-list management for a site or for the global scope.

The allow-list artifact is its own source of truth: it is parsed before every
command and rewritten in full. An absent artifact means no IP restriction.

Artifact layout::

    satisfy any;
    allow 10.0.0.1;
    allow 10.0.0.2;
    deny all;
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..config import ProxyConfig, get_config
from ..constants import (
    ACL_HEADER,
    ACL_SUFFIX,
    ACL_TRAILER,
    GLOBAL_ACL_NAME,
    REMOVE_ALL_SENTINEL,
    WhitelistCommand,
)
from ..exceptions import EmptyAllowListError, NoMatchingIPsError, ValidationError
from ..proxy.reload import ProxyReloader
from ..schemas.scope_schemas import ScopeContext, WhitelistResult
from ..utils.file_utils import atomic_write, read_text, remove_file
from ..utils.logger import get_logger


def unique(ips: Iterable[str]) -> List[str]:
    """Drop duplicates, keeping first occurrences in order."""
    return list(dict.fromkeys(ips))


def parse_ip_argument(value: Optional[str]) -> List[str]:
    """Split a comma separated ``--ip`` value, dropping empty entries."""
    if not value:
        return []
    return [ip.strip() for ip in value.split(",") if ip.strip()]


def parse_allow_list(content: str) -> List[str]:
    """
    Extract the allowed IPs from an artifact.

    The first and last non-empty lines are structural and skipped.
    """
    lines = [line.strip() for line in content.splitlines() if line.strip()]
    ips = []
    for line in lines[1:-1]:
        ip = line.replace("allow ", "").replace(";", "").strip()
        if ip:
            ips.append(ip)
    return ips


def render_allow_list(ips: Sequence[str]) -> str:
    lines = [ACL_HEADER]
    lines.extend(f"allow {ip};" for ip in ips)
    lines.append(ACL_TRAILER)
    return "\n".join(lines)


class WhitelistService:
    """create, append, list and remove allow-list entries of a target."""

    def __init__(self, reloader: ProxyReloader, config: Optional[ProxyConfig] = None):
        self.reloader = reloader
        self.config = config or get_config().proxy
        self.logger = get_logger()

    def acl_path(self, ctx: ScopeContext) -> Path:
        name = GLOBAL_ACL_NAME if ctx.is_global else f"{ctx.site_url}{ACL_SUFFIX}"
        return Path(self.config.vhost_dir) / name

    def read_ips(self, ctx: ScopeContext) -> List[str]:
        return parse_allow_list(read_text(self.acl_path(ctx)))

    def run(self, command: str, ctx: ScopeContext, ips: Sequence[str]) -> WhitelistResult:
        """
        Dispatch an allow-list sub-command and reload the proxy once.

        Raises:
            ValidationError: If ``command`` is unknown or an IP is blank
        """
        try:
            whitelist_command = WhitelistCommand(command)
        except ValueError:
            usage = "\n".join(
                f"ee auth whitelist {c.value} [<site-name>/global] [--ip=<ip>]"
                for c in WhitelistCommand
            )
            raise ValidationError(
                f"Please use valid command syntax. You can use:\n{usage}",
                field="command",
                value=command,
                site_url=ctx.site_url,
            )

        ips = [ip.strip() for ip in ips]
        if any(not ip for ip in ips):
            raise ValidationError(
                "IP addresses cannot be empty",
                field="ips",
                value=list(ips),
                site_url=ctx.site_url,
            )

        handler = getattr(self, f"_{whitelist_command.value}")
        result = handler(ctx, ips, self.read_ips(ctx))
        self.reloader.reload()
        return result

    def create(self, ctx: ScopeContext, ips: Sequence[str]) -> WhitelistResult:
        return self.run(WhitelistCommand.CREATE.value, ctx, ips)

    def append(self, ctx: ScopeContext, ips: Sequence[str]) -> WhitelistResult:
        return self.run(WhitelistCommand.APPEND.value, ctx, ips)

    def list(self, ctx: ScopeContext) -> WhitelistResult:
        return self.run(WhitelistCommand.LIST.value, ctx, [])

    def remove(self, ctx: ScopeContext, ips: Sequence[str]) -> WhitelistResult:
        return self.run(WhitelistCommand.REMOVE.value, ctx, ips)

    def _create(self, ctx: ScopeContext, ips: List[str], existing: List[str]) -> WhitelistResult:
        new_ips = unique(ips)
        atomic_write(self.acl_path(ctx), render_allow_list(new_ips))
        self.logger.info(
            f"Created whitelist for `{ctx.display_name}` scope with {','.join(new_ips)} IP's.",
            extra={"site_url": ctx.site_url},
        )
        return WhitelistResult(site_url=ctx.site_url, ips=new_ips)

    def _append(self, ctx: ScopeContext, ips: List[str], existing: List[str]) -> WhitelistResult:
        new_ips = unique([*ips, *existing])
        atomic_write(self.acl_path(ctx), render_allow_list(new_ips))
        self.logger.info(
            f"Appended {','.join(ips)} IP's to whitelist of `{ctx.display_name}` scope",
            extra={"site_url": ctx.site_url},
        )
        return WhitelistResult(site_url=ctx.site_url, ips=new_ips)

    def _list(self, ctx: ScopeContext, ips: List[str], existing: List[str]) -> WhitelistResult:
        if not existing:
            raise EmptyAllowListError(
                f"No Whitelisted IP's found for {ctx.display_name} scope",
                site_url=ctx.site_url,
            )
        self.logger.info(f"Whitelisted IP's for {ctx.display_name} scope")
        for ip in existing:
            self.logger.info(ip)
        return WhitelistResult(site_url=ctx.site_url, ips=existing)

    def _remove(self, ctx: ScopeContext, ips: List[str], existing: List[str]) -> WhitelistResult:
        path = self.acl_path(ctx)

        if not ips or REMOVE_ALL_SENTINEL in ips:
            remove_file(path)
            self.logger.info(
                f"Removed whitelist of `{ctx.display_name}` scope",
                extra={"site_url": ctx.site_url},
            )
            return WhitelistResult(site_url=ctx.site_url, removed=existing, artifact_removed=True)

        requested = unique(ips)
        removed = [ip for ip in existing if ip in requested]
        not_found = [ip for ip in requested if ip not in removed]
        remaining = [ip for ip in existing if ip not in requested]

        # Failure takes precedence over the not-found warning
        if not removed:
            raise NoMatchingIPsError(
                f"{','.join(requested)} IP's not found in whitelist of `{ctx.display_name}` scope",
                site_url=ctx.site_url,
                requested=requested,
            )

        if remaining:
            atomic_write(path, render_allow_list(remaining))
        else:
            remove_file(path)

        if not_found:
            self.logger.warning(
                f"Could not find {','.join(not_found)} IP's from whitelist of "
                f"`{ctx.display_name}` scope",
                extra={"site_url": ctx.site_url},
            )
        self.logger.info(
            f"Removed {','.join(removed)} IP's from whitelist of `{ctx.display_name}` scope",
            extra={"site_url": ctx.site_url},
        )
        return WhitelistResult(
            site_url=ctx.site_url,
            ips=remaining,
            removed=removed,
            not_found=not_found,
            artifact_removed=not remaining,
        )
