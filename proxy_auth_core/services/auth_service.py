"""
Service for managing HTTP basic-auth credentials of hosted sites.

Every mutation goes to the credential store first and is then projected onto
the htpasswd artifact of the affected scope. The proxy is reloaded once at the
end of each command.

Consistency is at-least-once: if an artifact write fails after the store was
updated, the store is ahead of the artifacts. No rollback is attempted; the
raised ArtifactWriteError names the scopes already done, and re-running the
same command converges because every artifact write is idempotent.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..constants import DEFAULT_SITE_URL, DEFAULT_USERNAME, Scope, ScopeSelection
from ..exceptions import ArtifactWriteError, CredentialAlreadyExistsError
from ..proxy.credential_files import CredentialFileSync
from ..proxy.htpasswd import HtpasswdClient
from ..proxy.reload import ProxyReloader
from ..repositories.credential_repository import CredentialRepository
from ..schemas.auth_schemas import AuthQuery, AuthUserCreate, AuthUserRead
from ..schemas.scope_schemas import ScopeContext
from ..utils.logger import get_logger
from ..utils.password_utils import random_password


class AuthService:
    """
    High-level credential operations.

    - init: bootstrap the global admin-tools credential
    - create: add a user to both scopes of a site
    - update: change a user's password in the selected scopes
    - delete: remove users from the selected scopes
    - list: show the users of the selected scopes
    """

    def __init__(
        self,
        session: Session,
        htpasswd: HtpasswdClient,
        reloader: ProxyReloader,
        file_sync: Optional[CredentialFileSync] = None,
    ):
        self.repository = CredentialRepository(session)
        self.htpasswd = htpasswd
        self.file_sync = file_sync or CredentialFileSync(htpasswd)
        self.reloader = reloader
        self.logger = get_logger()

    def _write_failed(
        self, error: ArtifactWriteError, ctx: ScopeContext, scope: Scope, completed: List[str]
    ) -> ArtifactWriteError:
        return error.add_context(
            site_url=ctx.site_url,
            failed_scope=scope.value,
            completed_scopes=completed,
            hint="credential store is ahead of the artifacts; re-run the command to converge",
        )

    def init(self) -> Optional[AuthUserRead]:
        """
        Create the global admin-tools credential with a random password.

        Returns:
            The created record, or None if it already existed
        """
        self.htpasswd.verify_present()
        existing = self.repository.find(
            site_url=DEFAULT_SITE_URL, username=DEFAULT_USERNAME, scope=Scope.ADMIN_TOOLS.value
        )
        if existing:
            self.logger.info("Global auth exists on admin-tools")
            return None

        record = self.repository.insert(
            AuthUserCreate(
                site_url=DEFAULT_SITE_URL,
                username=DEFAULT_USERNAME,
                password=random_password(),
                scope=Scope.ADMIN_TOOLS,
            )
        )
        created = AuthUserRead.model_validate(record)
        self.file_sync.put(DEFAULT_SITE_URL, Scope.ADMIN_TOOLS, created.username, created.password)

        self.logger.info("Global admin-tools auth added.")
        self.logger.info(f"User: {created.username}")
        self.logger.info(f"Pass: {created.password}")
        return created

    def create(
        self,
        ctx: ScopeContext,
        username: str = DEFAULT_USERNAME,
        password: Optional[str] = None,
    ) -> List[AuthUserRead]:
        """
        Add ``username`` to both scopes of the target.

        The whole command fails before any write when the username already
        exists on the site in any scope, so one scope's password can never be
        overwritten while the other keeps the old one.

        Raises:
            CredentialAlreadyExistsError: If the username is taken on the site
            ArtifactWriteError: If an artifact write failed after the store changed
        """
        self.htpasswd.verify_present()
        password = password or random_password()

        self.logger.debug("auth create start", extra=ctx.log_extra())

        if self.repository.exists(ctx.site_url, username):
            raise CredentialAlreadyExistsError(
                f"Auth with username {username} already exists on {ctx.site_url}",
                site_url=ctx.site_url,
                username=username,
                scope=ctx.scope.value,
            )

        created: List[AuthUserRead] = []
        for scope in ScopeSelection.ALL.scopes:
            record = self.repository.insert(
                AuthUserCreate(
                    site_url=ctx.site_url, username=username, password=password, scope=scope
                )
            )
            stored = AuthUserRead.model_validate(record)
            created.append(stored)
            try:
                self.file_sync.put(ctx.site_url, scope, stored.username, stored.password)
            except ArtifactWriteError as e:
                raise self._write_failed(e, ctx, scope, [c.scope.value for c in created[:-1]])

        self.reloader.reload()

        self.logger.info(
            f"Auth successfully updated for `{ctx.display_name}` scope. New values added/updated:"
        )
        self.logger.info(f"User: {username}")
        self.logger.info(f"Pass: {password}")
        return created

    def get_auths(self, ctx: ScopeContext, username: Optional[str] = None) -> List[AuthUserRead]:
        """
        Records of the target in the selected scopes, optionally for one user.

        Raises:
            NoMatchingCredentialError: If nothing matches
        """
        query = AuthQuery(site_url=ctx.site_url, scope=ctx.scope, username=username)
        return [AuthUserRead.model_validate(r) for r in self.repository.get_auths(query)]

    def update(
        self,
        ctx: ScopeContext,
        username: str = DEFAULT_USERNAME,
        password: Optional[str] = None,
    ) -> List[AuthUserRead]:
        """
        Set a new password for ``username`` in the selected scopes.

        Raises:
            NoMatchingCredentialError: If the user has no record in those scopes
            ArtifactWriteError: If an artifact write failed after the store changed
        """
        self.htpasswd.verify_present()
        password = password or random_password()
        auths = self.get_auths(ctx, username)

        updated: List[AuthUserRead] = []
        for auth in auths:
            stored = AuthUserRead.model_validate(self.repository.update(auth.id, password))
            updated.append(stored)
            try:
                self.file_sync.put(ctx.site_url, stored.scope, stored.username, stored.password)
            except ArtifactWriteError as e:
                raise self._write_failed(e, ctx, auth.scope, [u.scope.value for u in updated[:-1]])

        self.reloader.reload()

        self.logger.info(
            f"Auth successfully updated for `{ctx.display_name}` scope. New values added/updated:"
        )
        self.logger.info(f"User: {username}")
        self.logger.info(f"Pass: {password}")
        return updated

    def delete(self, ctx: ScopeContext, username: Optional[str] = None) -> List[AuthUserRead]:
        """
        Remove ``username`` (or every user when omitted) from the selected scopes.

        Records outside the selected scopes and their artifact lines are left
        untouched. Removing the last ``site`` user removes the site artifact,
        which lifts http-auth from the site; the admin-tools artifact is only
        ever edited line by line.

        Raises:
            NoMatchingCredentialError: If nothing matches
            ArtifactWriteError: If an artifact write failed after the store changed
        """
        self.htpasswd.verify_present()
        auths = self.get_auths(ctx, username)

        deleted: List[AuthUserRead] = []
        for auth in auths:
            self.repository.delete(auth.id)
            deleted.append(auth)
            try:
                # Only the site scope drops its whole artifact once its last user is gone
                if auth.scope is Scope.SITE and not self.repository.find(
                    site_url=ctx.site_url, scope=auth.scope.value
                ):
                    self.file_sync.delete_all(ctx.site_url, auth.scope)
                else:
                    self.file_sync.delete_user(ctx.site_url, auth.scope, auth.username)
            except ArtifactWriteError as e:
                raise self._write_failed(e, ctx, auth.scope, [d.scope.value for d in deleted[:-1]])
            self.logger.info(
                f"http auth successfully removed of user: {auth.username} for {auth.scope.value}."
            )

        self.reloader.reload()
        return deleted

    def list(self, ctx: ScopeContext) -> List[AuthUserRead]:
        """
        Users of the target in the selected scopes.

        Raises:
            NoMatchingCredentialError: If the target has no users there
        """
        return self.get_auths(ctx)
