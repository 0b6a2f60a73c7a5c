"""Reverse proxy reload trigger."""

from typing import Optional

from ..exceptions import ReloadError
from ..utils.logger import get_logger
from .docker_exec import CommandFailed, ProxyExec


class ProxyReloader:
    """Makes the proxy re-read every credential and allow-list artifact."""

    def __init__(self, proxy_exec: Optional[ProxyExec] = None):
        self.proxy_exec = proxy_exec or ProxyExec()
        self.logger = get_logger()

    def reload(self) -> None:
        """
        Raises:
            ReloadError: If the reload command failed
        """
        self.logger.info("Reloading global reverse proxy.")
        try:
            self.proxy_exec.run(self.proxy_exec.config.reload_command)
        except CommandFailed as e:
            raise ReloadError(
                f"Failed to reload {self.proxy_exec.config.container_name}: {e.detail}",
                container=self.proxy_exec.config.container_name,
                cause=e,
            ) from e
