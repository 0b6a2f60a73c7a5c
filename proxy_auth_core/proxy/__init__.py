"""Collaborators living in the reverse proxy container."""

from .credential_files import CredentialFileSync, artifact_name, parse_usernames
from .docker_exec import CommandFailed, ProxyExec
from .htpasswd import HtpasswdClient
from .reload import ProxyReloader

__all__ = [
    "CommandFailed",
    "CredentialFileSync",
    "HtpasswdClient",
    "ProxyExec",
    "ProxyReloader",
    "artifact_name",
    "parse_usernames",
]
