"""
Tests for AuthService.

Uses a real SQLite credential store and fake proxy collaborators that write to
temporary htpasswd files.
"""

import pytest

from proxy_auth_core.constants import Scope, ScopeSelection
from proxy_auth_core.db import AuthUser
from proxy_auth_core.exceptions import (
    ArtifactWriteError,
    CredentialAlreadyExistsError,
    ExternalToolUnavailableError,
    NoMatchingCredentialError,
)
from proxy_auth_core.schemas import ScopeContext
from tests.fixtures.factories import AuthUserFactory
from tests.fixtures.fakes import read_artifact


def scoped(ctx: ScopeContext, scope: ScopeSelection) -> ScopeContext:
    return ctx.model_copy(update={"scope": scope})


class TestInit:
    def test_init_creates_global_admin_tools_user(self, auth_service, htpasswd_dir, db_session):
        created = auth_service.init()

        assert created.site_url == "default"
        assert created.username == "easyengine"
        assert created.scope is Scope.ADMIN_TOOLS
        assert len(created.password) == 18
        assert read_artifact(htpasswd_dir, "default_admin_tools") == {
            "easyengine": created.password
        }
        assert db_session.query(AuthUser).count() == 1

    def test_init_is_noop_when_present(self, auth_service, htpasswd):
        auth_service.init()
        assert auth_service.init() is None
        assert len([c for c in htpasswd.calls if c[0] == "store"]) == 1

    def test_init_requires_htpasswd(self, auth_service, htpasswd, db_session):
        htpasswd.available = False
        with pytest.raises(ExternalToolUnavailableError):
            auth_service.init()
        assert db_session.query(AuthUser).count() == 0


class TestCreate:
    def test_create_adds_both_scopes(self, auth_service, site_ctx, htpasswd_dir, reloader):
        created = auth_service.create(site_ctx, username="alice", password="s3cret")

        assert {c.scope for c in created} == {Scope.SITE, Scope.ADMIN_TOOLS}
        assert read_artifact(htpasswd_dir, "example.com") == {"alice": "s3cret"}
        assert read_artifact(htpasswd_dir, "example.com_admin_tools") == {"alice": "s3cret"}
        assert reloader.reloads == 1

    def test_create_then_list_all_returns_two_equal_records(self, auth_service, site_ctx):
        auth_service.create(site_ctx, username="alice", password="s3cret")

        listed = auth_service.list(site_ctx)

        assert len(listed) == 2
        assert {r.scope for r in listed} == {Scope.SITE, Scope.ADMIN_TOOLS}
        assert {r.password for r in listed} == {"s3cret"}

    def test_create_keeps_surrounding_spaces_in_store_and_artifact(
        self, auth_service, site_ctx, htpasswd_dir
    ):
        auth_service.create(site_ctx, username="alice", password=" pw ")

        stored = {r.password for r in auth_service.list(site_ctx)}

        assert stored == {" pw "}
        assert read_artifact(htpasswd_dir, "example.com") == {"alice": " pw "}
        assert read_artifact(htpasswd_dir, "example.com_admin_tools") == {"alice": " pw "}

    def test_create_generates_password_when_missing(self, auth_service, site_ctx):
        created = auth_service.create(site_ctx, username="bob")
        assert created[0].password == created[1].password
        assert len(created[0].password) == 18

    def test_create_uses_default_username(self, auth_service, global_ctx, htpasswd_dir):
        auth_service.create(global_ctx, password="pw")
        assert read_artifact(htpasswd_dir, "default") == {"easyengine": "pw"}
        assert read_artifact(htpasswd_dir, "default_admin_tools") == {"easyengine": "pw"}

    def test_create_twice_fails_without_writing(
        self, auth_service, site_ctx, htpasswd, reloader, db_session
    ):
        auth_service.create(site_ctx, username="alice", password="first")
        stores_before = len(htpasswd.calls)

        with pytest.raises(CredentialAlreadyExistsError) as exc_info:
            auth_service.create(site_ctx, username="alice", password="second")

        assert "alice already exists on example.com" in str(exc_info.value)
        assert [c for c in htpasswd.calls[stores_before:] if c[0] == "store"] == []
        assert db_session.query(AuthUser).count() == 2
        assert reloader.reloads == 1

    def test_create_conflicts_with_single_scope_user(
        self, auth_service, site_ctx, htpasswd_dir, db_session
    ):
        AuthUserFactory(site_url="example.com", username="alice", scope=Scope.ADMIN_TOOLS.value)

        with pytest.raises(CredentialAlreadyExistsError):
            auth_service.create(site_ctx, username="alice", password="new")

        assert read_artifact(htpasswd_dir, "example.com") == {}
        assert db_session.query(AuthUser).count() == 1

    def test_same_username_on_other_site_is_allowed(self, auth_service, site_ctx, global_ctx):
        auth_service.create(site_ctx, username="alice", password="a")
        created = auth_service.create(global_ctx, username="alice", password="b")
        assert len(created) == 2

    def test_create_keeps_other_users_in_artifact(self, auth_service, site_ctx, htpasswd_dir):
        auth_service.create(site_ctx, username="alice", password="a")
        auth_service.create(site_ctx, username="bob", password="b")

        assert read_artifact(htpasswd_dir, "example.com") == {"alice": "a", "bob": "b"}

    def test_write_failure_on_second_scope_reports_progress(
        self, auth_service, site_ctx, htpasswd, reloader, htpasswd_dir
    ):
        htpasswd.fail_on = "example.com_admin_tools"

        with pytest.raises(ArtifactWriteError) as exc_info:
            auth_service.create(site_ctx, username="alice", password="pw")

        assert exc_info.value.context["failed_scope"] == "admin-tools"
        assert exc_info.value.context["completed_scopes"] == ["site"]
        assert exc_info.value.context["site_url"] == "example.com"
        assert read_artifact(htpasswd_dir, "example.com") == {"alice": "pw"}
        assert reloader.reloads == 0


class TestUpdate:
    def test_update_all_scopes(self, auth_service, site_ctx, htpasswd_dir, reloader):
        auth_service.create(site_ctx, username="alice", password="old")

        updated = auth_service.update(site_ctx, username="alice", password="new")

        assert len(updated) == 2
        assert {u.password for u in updated} == {"new"}
        assert read_artifact(htpasswd_dir, "example.com") == {"alice": "new"}
        assert read_artifact(htpasswd_dir, "example.com_admin_tools") == {"alice": "new"}
        assert reloader.reloads == 2

    def test_update_writes_stored_password(self, auth_service, site_ctx, htpasswd_dir):
        auth_service.create(site_ctx, username="alice", password="old")

        auth_service.update(site_ctx, username="alice", password=" new ")

        assert {r.password for r in auth_service.list(site_ctx)} == {" new "}
        assert read_artifact(htpasswd_dir, "example.com") == {"alice": " new "}

    def test_update_single_scope(self, auth_service, site_ctx, htpasswd_dir):
        auth_service.create(site_ctx, username="alice", password="old")

        auth_service.update(
            scoped(site_ctx, ScopeSelection.ADMIN_TOOLS), username="alice", password="new"
        )

        assert read_artifact(htpasswd_dir, "example.com") == {"alice": "old"}
        assert read_artifact(htpasswd_dir, "example.com_admin_tools") == {"alice": "new"}
        by_scope = {r.scope: r.password for r in auth_service.list(site_ctx)}
        assert by_scope == {Scope.SITE: "old", Scope.ADMIN_TOOLS: "new"}

    def test_update_unknown_user(self, auth_service, site_ctx, reloader):
        with pytest.raises(NoMatchingCredentialError) as exc_info:
            auth_service.update(
                scoped(site_ctx, ScopeSelection.SITE), username="ghost", password="x"
            )
        assert str(exc_info.value) == "Auth with username: ghost does not exists on example.com for site"
        assert reloader.reloads == 0


class TestDelete:
    def test_delete_site_scope_only_keeps_admin_tools(
        self, auth_service, site_ctx, htpasswd_dir
    ):
        auth_service.create(site_ctx, username="alice", password="pw")
        auth_service.create(site_ctx, username="bob", password="pw2")

        deleted = auth_service.delete(scoped(site_ctx, ScopeSelection.SITE), username="alice")

        assert [(d.username, d.scope) for d in deleted] == [("alice", Scope.SITE)]
        assert read_artifact(htpasswd_dir, "example.com") == {"bob": "pw2"}
        assert read_artifact(htpasswd_dir, "example.com_admin_tools") == {
            "alice": "pw",
            "bob": "pw2",
        }
        remaining = {(r.username, r.scope) for r in auth_service.list(site_ctx)}
        assert ("alice", Scope.ADMIN_TOOLS) in remaining
        assert ("alice", Scope.SITE) not in remaining

    def test_delete_last_site_user_removes_site_artifact_only(
        self, auth_service, site_ctx, htpasswd_dir, htpasswd
    ):
        auth_service.create(site_ctx, username="alice", password="pw")

        auth_service.delete(site_ctx, username="alice")

        assert not (htpasswd_dir / "example.com").exists()
        assert (htpasswd_dir / "example.com_admin_tools").exists()
        assert read_artifact(htpasswd_dir, "example.com_admin_tools") == {}
        assert ("remove", "example.com_admin_tools", "alice") in htpasswd.calls
        assert ("remove_artifact", "example.com_admin_tools") not in htpasswd.calls

    def test_delete_last_global_admin_tools_user_keeps_artifact(
        self, auth_service, global_ctx, htpasswd_dir
    ):
        auth_service.init()

        auth_service.delete(scoped(global_ctx, ScopeSelection.ADMIN_TOOLS))

        assert (htpasswd_dir / "default_admin_tools").exists()
        assert read_artifact(htpasswd_dir, "default_admin_tools") == {}

    def test_delete_without_username_removes_every_user(self, auth_service, site_ctx, db_session):
        auth_service.create(site_ctx, username="alice", password="a")
        auth_service.create(site_ctx, username="bob", password="b")

        deleted = auth_service.delete(site_ctx)

        assert len(deleted) == 4
        assert db_session.query(AuthUser).count() == 0

    def test_delete_tolerates_drifted_artifact(
        self, auth_service, site_ctx, htpasswd_dir, htpasswd
    ):
        auth_service.create(site_ctx, username="alice", password="a")
        auth_service.create(site_ctx, username="bob", password="b")
        (htpasswd_dir / "example.com").write_text("bob:{PLAIN}b\n")

        auth_service.delete(scoped(site_ctx, ScopeSelection.SITE), username="alice")

        assert ("remove", "example.com", "alice") not in htpasswd.calls

    def test_delete_nothing_matching(self, auth_service, global_ctx):
        with pytest.raises(NoMatchingCredentialError) as exc_info:
            auth_service.delete(global_ctx)
        assert str(exc_info.value) == "Auth does not exists on global"


class TestList:
    def test_list_filters_by_scope(self, auth_service, site_ctx):
        auth_service.create(site_ctx, username="alice", password="a")

        rows = [r.to_row() for r in auth_service.list(scoped(site_ctx, ScopeSelection.SITE))]

        assert rows == [{"username": "alice", "password": "a", "scope": "site"}]

    def test_list_empty(self, auth_service, site_ctx):
        with pytest.raises(NoMatchingCredentialError):
            auth_service.list(scoped(site_ctx, ScopeSelection.ADMIN_TOOLS))
