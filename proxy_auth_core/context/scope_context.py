"""
Scope resolution for credential and allow-list commands.

A command names a target (a site or ``global``) and optionally narrows it with
``--site`` / ``--admin-tools``. This module turns that into an explicit
ScopeContext value that is passed to every operation.
"""

from typing import Mapping, Optional, Protocol, Union

from sqlalchemy.orm import Session

from ..constants import GLOBAL_TARGET, ScopeSelection
from ..db.db_site_models import Site
from ..exceptions import SiteNotFoundError
from ..schemas.scope_schemas import ScopeContext, SiteInfo
from ..utils.logger import get_logger


class SiteLookup(Protocol):
    """Resolves a site name to its stored metadata."""

    def lookup(self, name: str) -> Optional[SiteInfo]:
        ...


class DatabaseSiteLookup:
    """Site lookup backed by the ``sites`` table."""

    def __init__(self, session: Session):
        self.session = session

    def lookup(self, name: str) -> Optional[SiteInfo]:
        site = self.session.query(Site).filter(Site.site_url == name).first()
        if site is None:
            return None
        return SiteInfo(site_url=site.site_url, enabled=bool(site.site_enabled))


class StaticSiteLookup:
    """Site lookup over an in-memory mapping of site_url to enabled flag."""

    def __init__(self, sites: Mapping[str, bool]):
        self.sites = dict(sites)

    def lookup(self, name: str) -> Optional[SiteInfo]:
        if name not in self.sites:
            return None
        return SiteInfo(site_url=name, enabled=self.sites[name])


def get_scope(site: bool = False, admin_tools: bool = False) -> ScopeSelection:
    """
    Pick the scope selection from the two scope flags.

    Exactly one flag selects that scope; none or both select all scopes.
    """
    if site and not admin_tools:
        return ScopeSelection.SITE
    if admin_tools and not site:
        return ScopeSelection.ADMIN_TOOLS
    return ScopeSelection.ALL


def resolve_scope(
    target: str,
    site_lookup: SiteLookup,
    site: bool = False,
    admin_tools: bool = False,
) -> ScopeContext:
    """
    Resolve a command target into a ScopeContext.

    Args:
        target: Site name, or ``global`` for the global pseudo-site
        site_lookup: Used for non-global targets only
        site: ``--site`` flag
        admin_tools: ``--admin-tools`` flag

    Raises:
        SiteNotFoundError: If the site does not exist or is disabled
    """
    scope = get_scope(site, admin_tools)

    if target == GLOBAL_TARGET:
        return ScopeContext.global_context(scope)

    info = site_lookup.lookup(target)
    if info is None or not info.enabled:
        raise SiteNotFoundError(
            f"Site {target} does not exist or is not enabled",
            site_url=target,
            scope=scope.value,
        )

    ctx = ScopeContext(site_url=info.site_url, scope=scope)
    get_logger().debug("Resolved command scope", extra=ctx.log_extra())
    return ctx


def resolve(
    target: str,
    site_lookup: SiteLookup,
    flags: Optional[Mapping[str, Union[bool, str]]] = None,
) -> ScopeContext:
    """Resolve from a flags mapping such as ``{"site": True, "admin-tools": False}``."""
    flags = flags or {}
    return resolve_scope(
        target,
        site_lookup,
        site=bool(flags.get("site", False)),
        admin_tools=bool(flags.get("admin-tools", flags.get("admin_tools", False))),
    )
