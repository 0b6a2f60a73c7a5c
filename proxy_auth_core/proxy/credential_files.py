"""
Credential artifact synchronization.

One htpasswd file exists per (site_url, scope). The ``site`` scope file is
named after the site; the ``admin-tools`` scope file carries a suffix so the
proxy can protect the two URL path sets with different credentials.
"""

from typing import List, Optional

from ..config import ProxyConfig, get_config
from ..constants import ADMIN_TOOLS_SUFFIX, Scope
from ..utils.logger import get_logger
from .htpasswd import HtpasswdClient


def artifact_name(site_url: str, scope: Scope) -> str:
    """File name of the credential artifact for ``site_url`` in ``scope``."""
    scope = Scope(scope)
    if scope is Scope.ADMIN_TOOLS:
        return f"{site_url}{ADMIN_TOOLS_SUFFIX}"
    return site_url


def parse_usernames(content: str) -> List[str]:
    """Usernames of a ``username:hash`` artifact, in file order."""
    usernames = []
    for line in content.splitlines():
        line = line.strip()
        if not line or ":" not in line:
            continue
        usernames.append(line.split(":", 1)[0])
    return usernames


class CredentialFileSync:
    """
    Projects credential store mutations onto htpasswd artifacts.

    Artifacts are inspected inside the proxy container through the client,
    never on a host path that might be mounted elsewhere.
    """

    def __init__(self, client: HtpasswdClient, config: Optional[ProxyConfig] = None):
        self.client = client
        self.config = config or get_config().proxy
        self.logger = get_logger()

    def container_path(self, site_url: str, scope: Scope) -> str:
        return f"{self.config.container_htpasswd_dir.rstrip('/')}/{artifact_name(site_url, scope)}"

    def read_usernames(self, site_url: str, scope: Scope) -> List[str]:
        return parse_usernames(self.client.read_artifact(self.container_path(site_url, scope)))

    def put(self, site_url: str, scope: Scope, username: str, password: str) -> None:
        """
        Create-or-update the entry for ``username``.

        The artifact is created when absent; otherwise only the matching line
        changes.
        """
        path = self.container_path(site_url, scope)
        create = not self.client.artifact_exists(path)
        self.client.hash_and_store(path, username, password, create=create)
        self.logger.debug(
            "Credential artifact updated",
            extra={
                "site_url": site_url,
                "scope": Scope(scope).value,
                "username": username,
                "new_file": create,
            },
        )

    def delete_user(self, site_url: str, scope: Scope, username: str) -> bool:
        """
        Remove the entry for ``username``.

        A missing artifact or a missing line is not an error: the store is
        authoritative and the artifact may have drifted after a partial failure.

        Returns:
            True if a line was removed
        """
        if username not in self.read_usernames(site_url, scope):
            self.logger.debug(
                "User already absent from credential artifact",
                extra={"site_url": site_url, "scope": Scope(scope).value, "username": username},
            )
            return False
        self.client.remove_entry(self.container_path(site_url, scope), username)
        return True

    def delete_all(self, site_url: str, scope: Scope) -> bool:
        """Remove the whole artifact for ``site_url`` in ``scope``."""
        removed = self.client.remove_artifact(self.container_path(site_url, scope))
        if removed:
            self.logger.debug(
                "Credential artifact removed",
                extra={"site_url": site_url, "scope": Scope(scope).value},
            )
        return removed
