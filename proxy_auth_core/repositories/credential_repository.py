"""
Repository for HTTP auth credential records.

The repository is the only owner of record identity. Credential artifacts
written for the proxy are projections of these rows and can be regenerated
from them at any time.
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import Scope
from ..db.db_auth_models import AuthUser
from ..exceptions import (
    CredentialRecordNotFoundError,
    DuplicateCredentialError,
    ErrorCode,
    RepositoryError,
)
from ..schemas.auth_schemas import AuthQuery, AuthUserCreate
from ..utils.logger import get_logger


class CredentialRepository:
    """
    Data access for AuthUser rows.

    Every mutation commits immediately. Commands touch one record per artifact
    write, so a failure part way through leaves every earlier record durable
    and a rerun converges.
    """

    def __init__(self, session: Session):
        self.session = session
        self.logger = get_logger()

    def find(
        self,
        site_url: Optional[str] = None,
        username: Optional[str] = None,
        scope: Optional[str] = None,
    ) -> List[AuthUser]:
        """
        Return every record matching the supplied fields.

        Omitted fields are unconstrained. Order is unspecified.
        """
        query = self.session.query(AuthUser)
        if site_url is not None:
            query = query.filter(AuthUser.site_url == site_url)
        if username is not None:
            query = query.filter(AuthUser.username == username)
        if scope is not None:
            query = query.filter(AuthUser.scope == Scope(scope).value)
        return query.all()

    def exists(self, site_url: str, username: str) -> bool:
        """True if ``username`` has a record on ``site_url`` in any scope."""
        return bool(self.find(site_url=site_url, username=username))

    def get_auths(self, query: AuthQuery) -> List[AuthUser]:
        """
        Run a scope-filtered query.

        Raises:
            NoMatchingCredentialError: If nothing matches
        """
        records = self.find(**query.filters())
        return query.require(records)

    def get_by_id(self, record_id: str) -> Optional[AuthUser]:
        return self.session.get(AuthUser, record_id)

    def insert(self, data: AuthUserCreate) -> AuthUser:
        """
        Insert one record.

        Raises:
            DuplicateCredentialError: If (site_url, username, scope) already exists
            RepositoryError: If the database operation fails
        """
        identifiers = {
            "site_url": data.site_url,
            "username": data.username,
            "scope": data.scope.value,
        }
        if self.find(**identifiers):
            raise DuplicateCredentialError(
                f"Auth {data.username} already exists on {data.site_url} for {data.scope.value}",
                **identifiers,
            )

        record = AuthUser(
            site_url=data.site_url,
            username=data.username,
            password=data.password,
            scope=data.scope.value,
        )
        try:
            self.session.add(record)
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateCredentialError(
                f"Auth {data.username} already exists on {data.site_url} for {data.scope.value}",
                cause=e,
                **identifiers,
            ) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RepositoryError(
                "Failed to store credential",
                error_code=ErrorCode.DATABASE_ERROR,
                cause=e,
                **identifiers,
            ) from e

        self.logger.debug("Credential record created", extra={"record_id": record.id, **identifiers})
        return record

    def update(self, record_id: str, new_password: str) -> AuthUser:
        """
        Replace the password of one record.

        Raises:
            CredentialRecordNotFoundError: If the record no longer exists
        """
        record = self.get_by_id(record_id)
        if record is None:
            raise CredentialRecordNotFoundError(
                f"Credential record {record_id} no longer exists", record_id=record_id
            )

        record.password = new_password
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RepositoryError(
                "Failed to update credential",
                error_code=ErrorCode.DATABASE_ERROR,
                cause=e,
                record_id=record_id,
            ) from e

        self.logger.debug(
            "Credential record updated",
            extra={"record_id": record_id, "site_url": record.site_url, "scope": record.scope},
        )
        return record

    def delete(self, record_id: str) -> bool:
        """
        Remove one record; removing a missing record is not an error.

        Returns:
            True if a record was removed
        """
        record = self.get_by_id(record_id)
        if record is None:
            return False

        try:
            self.session.delete(record)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RepositoryError(
                "Failed to delete credential",
                error_code=ErrorCode.DATABASE_ERROR,
                cause=e,
                record_id=record_id,
            ) from e

        self.logger.debug("Credential record deleted", extra={"record_id": record_id})
        return True
