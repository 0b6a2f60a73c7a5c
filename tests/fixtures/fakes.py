"""
In-process stand-ins for the proxy container.

FakeHtpasswdClient maps container artifact paths onto a local directory and
writes ``username:{PLAIN}password`` lines, mirroring ``htpasswd -b``/``-bc``/``-D``.
"""

from pathlib import Path
from typing import List, Optional

from proxy_auth_core.exceptions import ArtifactWriteError, ExternalToolUnavailableError, ReloadError
from proxy_auth_core.proxy.htpasswd import HtpasswdClient
from proxy_auth_core.proxy.reload import ProxyReloader


class FakeHtpasswdClient(HtpasswdClient):
    def __init__(self, root: Path):
        self.root = Path(root)
        self.available = True
        self.fail_on: Optional[str] = None
        self.calls: List[tuple] = []

    def _local_path(self, artifact_path: str) -> Path:
        return self.root / Path(artifact_path).name

    def _read(self, path: Path) -> List[str]:
        if not path.exists():
            return []
        return [line for line in path.read_text().splitlines() if line]

    def verify_present(self) -> None:
        self.calls.append(("verify",))
        if not self.available:
            raise ExternalToolUnavailableError(
                "Could not find apache2-utils installed in fake-proxy."
            )

    def artifact_exists(self, artifact_path):
        return self._local_path(artifact_path).exists()

    def read_artifact(self, artifact_path):
        path = self._local_path(artifact_path)
        return path.read_text() if path.exists() else ""

    def remove_artifact(self, artifact_path):
        self.calls.append(("remove_artifact", Path(artifact_path).name))
        path = self._local_path(artifact_path)
        if not path.exists():
            return False
        path.unlink()
        return True

    def hash_and_store(self, artifact_path, username, password, create):
        self.calls.append(("store", Path(artifact_path).name, username, create))
        if self.fail_on == Path(artifact_path).name:
            raise ArtifactWriteError(f"Failed to write {username} to {artifact_path}")
        path = self._local_path(artifact_path)
        lines = [] if create else self._read(path)
        entry = f"{username}:{{PLAIN}}{password}"
        replaced = False
        for i, line in enumerate(lines):
            if line.split(":", 1)[0] == username:
                lines[i] = entry
                replaced = True
        if not replaced:
            lines.append(entry)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n")

    def remove_entry(self, artifact_path, username):
        self.calls.append(("remove", Path(artifact_path).name, username))
        path = self._local_path(artifact_path)
        lines = [line for line in self._read(path) if line.split(":", 1)[0] != username]
        path.write_text("\n".join(lines) + ("\n" if lines else ""))


class FakeReloader(ProxyReloader):
    def __init__(self):
        self.reloads = 0
        self.fail = False

    def reload(self) -> None:
        if self.fail:
            raise ReloadError("Failed to reload fake-proxy")
        self.reloads += 1


def read_artifact(root: Path, name: str) -> dict:
    """username -> password of a fake htpasswd artifact."""
    path = Path(root) / name
    if not path.exists():
        return {}
    entries = {}
    for line in path.read_text().splitlines():
        if line:
            user, hashed = line.split(":", 1)
            entries[user] = hashed.replace("{PLAIN}", "")
    return entries
