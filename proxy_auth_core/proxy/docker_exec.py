"""
Run commands inside the reverse proxy container.
"""

import subprocess
from typing import List, Optional, Sequence

from ..config import ProxyConfig, get_config
from ..exceptions import ErrorCode, ExternalServiceError
from ..utils.logger import get_logger


class CommandFailed(ExternalServiceError):
    """
    A command run inside the proxy container did not succeed.

    Only the program name reaches the message and context; the full argument
    list may carry a plaintext password and stays on ``command``.
    """

    def __init__(self, command: Sequence[str], detail: str, returncode: Optional[int] = None):
        self.command = list(command)
        self.detail = detail
        self.returncode = returncode
        program = self.command[0] if self.command else ""
        super().__init__(
            f"{program}: {detail}",
            service_name="proxy-container",
            error_code=ErrorCode.EXTERNAL_TOOL_ERROR,
            program=program,
            returncode=returncode,
        )


class ProxyExec:
    """Thin wrapper over ``docker exec <proxy container> ...``."""

    def __init__(self, config: Optional[ProxyConfig] = None):
        self.config = config or get_config().proxy
        self.logger = get_logger()

    def build(self, args: Sequence[str]) -> List[str]:
        return [self.config.docker_binary, "exec", self.config.container_name, *args]

    def run(self, args: Sequence[str], check: bool = True) -> subprocess.CompletedProcess:
        """
        Run ``args`` in the proxy container.

        With ``check=False`` a non-zero exit is returned to the caller instead
        of raising.

        Raises:
            CommandFailed: On a missing docker binary, a timeout or (when
                checking) a non-zero exit
        """
        command = self.build(args)
        # Never log the arguments, they may carry a plaintext password
        self.logger.debug(
            "Running command in proxy container",
            extra={"container": self.config.container_name, "program": args[0] if args else ""},
        )
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.command_timeout,
            )
        except FileNotFoundError as e:
            raise CommandFailed(args, f"{self.config.docker_binary} is not installed") from e
        except subprocess.TimeoutExpired as e:
            raise CommandFailed(args, f"timed out ({self.config.command_timeout}s)") from e

        if check and result.returncode != 0:
            raise CommandFailed(args, (result.stderr or result.stdout).strip(), result.returncode)
        return result
