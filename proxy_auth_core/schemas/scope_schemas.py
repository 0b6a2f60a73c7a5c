"""
Schemas describing the resolved target of a command.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..constants import DEFAULT_SITE_URL, GLOBAL_TARGET, ScopeSelection


class SiteInfo(BaseModel):
    """What the site lookup knows about a site."""

    site_url: str
    enabled: bool = True


class ScopeContext(BaseModel):
    """
    Resolved target threaded through every credential and allow-list operation.

    ``site_url`` is the stored key (``default`` for the global pseudo-site);
    ``display_name`` is what messages show (``global`` for the same case).
    """

    model_config = ConfigDict(frozen=True)

    site_url: str
    scope: ScopeSelection = ScopeSelection.ALL
    is_global: bool = False

    @property
    def display_name(self) -> str:
        return GLOBAL_TARGET if self.is_global else self.site_url

    @classmethod
    def global_context(cls, scope: ScopeSelection = ScopeSelection.ALL) -> "ScopeContext":
        return cls(site_url=DEFAULT_SITE_URL, scope=scope, is_global=True)

    def log_extra(self) -> dict:
        return {"site_url": self.site_url, "scope": self.scope.value}


class WhitelistResult(BaseModel):
    """Outcome of an allow-list command."""

    site_url: str
    ips: List[str] = Field(default_factory=list, description="Allow-list after the command")
    removed: List[str] = Field(default_factory=list)
    not_found: List[str] = Field(default_factory=list, description="Requested but absent IPs")
    artifact_removed: bool = False
