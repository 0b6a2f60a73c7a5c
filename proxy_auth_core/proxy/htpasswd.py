"""
htpasswd helper running inside the proxy container.

Hashing is delegated to the ``htpasswd`` binary so the proxy's basic-auth
module always understands the stored format. Every artifact path is the
container-side path, so existence checks and reads see the same file the
proxy and ``htpasswd`` see.
"""

from typing import Optional

from ..exceptions import ArtifactWriteError, ExternalToolUnavailableError
from .docker_exec import CommandFailed, ProxyExec


class HtpasswdClient:
    """Create-or-update and remove entries in a credential artifact."""

    def __init__(self, proxy_exec: Optional[ProxyExec] = None):
        self.proxy_exec = proxy_exec or ProxyExec()

    def verify_present(self) -> None:
        """
        Raises:
            ExternalToolUnavailableError: If htpasswd cannot be run in the proxy container
        """
        try:
            self.proxy_exec.run(["sh", "-c", "command -v htpasswd"])
        except CommandFailed as e:
            raise ExternalToolUnavailableError(
                f"Could not find apache2-utils installed in {self.proxy_exec.config.container_name}.",
                container=self.proxy_exec.config.container_name,
                cause=e,
            ) from e

    def artifact_exists(self, artifact_path: str) -> bool:
        """
        Raises:
            ArtifactWriteError: If the container could not be reached
        """
        try:
            result = self.proxy_exec.run(["test", "-f", artifact_path], check=False)
        except CommandFailed as e:
            raise ArtifactWriteError(
                f"Failed to inspect {artifact_path}: {e.detail}", path=artifact_path, cause=e
            ) from e
        return result.returncode == 0

    def read_artifact(self, artifact_path: str) -> str:
        """Content of ``artifact_path``, or an empty string when it does not exist."""
        if not self.artifact_exists(artifact_path):
            return ""
        try:
            return self.proxy_exec.run(["cat", artifact_path]).stdout
        except CommandFailed as e:
            raise ArtifactWriteError(
                f"Failed to read {artifact_path}: {e.detail}", path=artifact_path, cause=e
            ) from e

    def remove_artifact(self, artifact_path: str) -> bool:
        """
        Delete ``artifact_path``.

        Returns:
            True if a file was removed, False if it was already absent
        """
        if not self.artifact_exists(artifact_path):
            return False
        try:
            self.proxy_exec.run(["rm", "-f", artifact_path])
        except CommandFailed as e:
            raise ArtifactWriteError(
                f"Failed to remove {artifact_path}: {e.detail}", path=artifact_path, cause=e
            ) from e
        return True

    def hash_and_store(self, artifact_path: str, username: str, password: str, create: bool) -> None:
        """
        Write ``username`` with a hashed ``password`` into ``artifact_path``.

        ``create`` starts a new file (``-c``); otherwise the matching line is
        replaced or appended, leaving other users untouched.
        """
        flags = "-bc" if create else "-b"
        try:
            self.proxy_exec.run(["htpasswd", flags, artifact_path, username, password])
        except CommandFailed as e:
            raise ArtifactWriteError(
                f"Failed to write {username} to {artifact_path}: {e.detail}",
                path=artifact_path,
                username=username,
                cause=e,
            ) from e

    def remove_entry(self, artifact_path: str, username: str) -> None:
        """Delete the line for ``username`` from ``artifact_path``."""
        try:
            self.proxy_exec.run(["htpasswd", "-D", artifact_path, username])
        except CommandFailed as e:
            raise ArtifactWriteError(
                f"Failed to remove {username} from {artifact_path}: {e.detail}",
                path=artifact_path,
                username=username,
                cause=e,
            ) from e
