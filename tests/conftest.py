"""
Shared fixtures: an in-memory credential store, temporary proxy directories
and fakes for the proxy container.
"""

import pytest
from sqlalchemy.orm import Session

from proxy_auth_core.config import AppConfig, DatabaseConfig, ProxyConfig, reset_config, set_config
from proxy_auth_core.context import StaticSiteLookup
from proxy_auth_core.db import DatabaseManager, close_db, initialize_db
from proxy_auth_core.proxy import CredentialFileSync
from proxy_auth_core.schemas import ScopeContext
from proxy_auth_core.services import AuthService, WhitelistService
from tests.fixtures.factories import AuthUserFactory, SiteFactory
from tests.fixtures.fakes import FakeHtpasswdClient, FakeReloader


@pytest.fixture
def proxy_config(tmp_path) -> ProxyConfig:
    """Proxy directories under a per-test temporary root."""
    vhost_dir = tmp_path / "vhost.d"
    vhost_dir.mkdir()
    return ProxyConfig(container_name="fake-proxy", vhost_dir=vhost_dir)


@pytest.fixture
def htpasswd_dir(tmp_path):
    """Local stand-in for the proxy container's htpasswd directory."""
    path = tmp_path / "htpasswd"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def app_config(proxy_config):
    """Install a test configuration for the duration of each test."""
    config = AppConfig(proxy=proxy_config)
    set_config(config)
    yield config
    reset_config()


@pytest.fixture
def db_manager() -> DatabaseManager:
    """Fresh SQLite in-memory credential store."""
    manager = initialize_db(
        DatabaseConfig(connection_string="sqlite:///:memory:"), development_mode=True
    )
    yield manager
    manager.drop_tables()
    close_db()


@pytest.fixture
def db_session(db_manager) -> Session:
    session = db_manager.get_session()
    AuthUserFactory._meta.sqlalchemy_session = session
    SiteFactory._meta.sqlalchemy_session = session
    yield session
    session.rollback()
    db_manager.close_session()


@pytest.fixture
def htpasswd(htpasswd_dir) -> FakeHtpasswdClient:
    return FakeHtpasswdClient(htpasswd_dir)


@pytest.fixture
def reloader() -> FakeReloader:
    return FakeReloader()


@pytest.fixture
def file_sync(htpasswd, proxy_config) -> CredentialFileSync:
    return CredentialFileSync(htpasswd, proxy_config)


@pytest.fixture
def auth_service(db_session, htpasswd, reloader, file_sync) -> AuthService:
    return AuthService(db_session, htpasswd, reloader, file_sync)


@pytest.fixture
def whitelist_service(reloader, proxy_config) -> WhitelistService:
    return WhitelistService(reloader, proxy_config)


@pytest.fixture
def site_lookup() -> StaticSiteLookup:
    return StaticSiteLookup({"example.com": True, "disabled.com": False})


@pytest.fixture
def site_ctx() -> ScopeContext:
    return ScopeContext(site_url="example.com")


@pytest.fixture
def global_ctx() -> ScopeContext:
    return ScopeContext.global_context()
