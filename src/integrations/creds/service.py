"""AWS Secrets Manager service for tenant integration credentials."""

import json
from functools import lru_cache

import boto3
from botocore.exceptions import ClientError
from cachetools import TTLCache
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_app_settings
from src.db.credentials.model import TenantCredentials
from src.db.credentials.schemas import (
    ConnectWiseCredentials,
    CredentialKind,
    CredentialsInput,
    PowerShellCertificateCredentials,
    ThreeCXCredentials,
)
from src.db.tenants.model import CustomerTenant
from src.integrations.creds.config import get_credentials_settings
from src.utils.logger import logger

# In-memory TTL cache keyed by (tenant_id, kind)
_credentials_cache: TTLCache = TTLCache(
    maxsize=get_credentials_settings().cache_max_size,
    ttl=get_credentials_settings().cache_ttl_seconds,
)


@lru_cache()
def get_secrets_manager_client():
    """
    Get AWS Secrets Manager client (singleton).

    Returns:
        boto3 Secrets Manager client
    """
    return boto3.client("secretsmanager", region_name=get_app_settings().aws_region)


def clear_credentials_cache() -> None:
    _credentials_cache.clear()


class TenantCredentialsService:
    """Service for managing tenant credentials in AWS Secrets Manager."""

    def __init__(self, session: AsyncSession, secrets_client=None):
        """
        Initialize the credentials service.

        Args:
            session: Async database session
            secrets_client: Optional secrets manager client (for testing)
        """
        self.session = session
        self.secrets_client = secrets_client or get_secrets_manager_client()

    async def save_credentials(
        self,
        tenant_id: str,
        kind: CredentialKind,
        data: CredentialsInput,
        user_id: str,
    ) -> TenantCredentials:
        """
        Create or replace a tenant's credentials for one integration.

        Secret fields left empty on a replace keep their stored values, so
        operators can edit settings without re-entering secrets.

        Raises:
            HTTPException: If secrets are missing on first save or the
                secret store rejects the write
        """
        secrets = data.secret_values()
        existing = await self.get_record(tenant_id, kind)

        if existing:
            missing = set(data.secret_fields) - set(secrets)
            if missing:
                stored = self._read_secret(existing.secret_arn)
                secrets = {**{key: stored[key] for key in missing if key in stored}, **secrets}
            self._put_secret(existing.secret_arn, kind, secrets)
            existing.settings = data.public_settings()
            await self.session.flush()
            await self.session.refresh(existing)
            _credentials_cache.pop((tenant_id, kind), None)
            logger.info("Updated credentials", tenant_id=tenant_id, kind=kind.value)
            return existing

        if set(data.secret_fields) - set(secrets):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Secret fields required: {', '.join(data.secret_fields)}",
            )

        secret_arn = self._create_secret(tenant_id, kind, secrets)
        record = TenantCredentials(
            tenant_id=tenant_id,
            kind=kind.value,
            settings=data.public_settings(),
            secret_arn=secret_arn,
            is_active=True,
            created_by=user_id,
        )
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record)
        _credentials_cache.pop((tenant_id, kind), None)
        return record

    async def get_record(
        self, tenant_id: str, kind: CredentialKind
    ) -> TenantCredentials | None:
        """
        Get the active credentials record (metadata only).

        Args:
            tenant_id: Tenant record UUID
            kind: Integration kind

        Returns:
            Credentials record or None
        """
        result = await self.session.execute(
            select(TenantCredentials).where(
                TenantCredentials.tenant_id == tenant_id,
                TenantCredentials.kind == kind.value,
                TenantCredentials.is_active == True,  # noqa: E712
            )
        )
        return result.scalar_one_or_none()

    async def get_credentials(self, tenant_id: str, kind: CredentialKind) -> dict:
        """
        Get settings merged with decrypted secrets, for server-side use.

        Raises:
            HTTPException: If no credentials are configured or the secret
                cannot be read
        """
        cache_key = (tenant_id, kind)
        if cache_key in _credentials_cache:
            logger.debug("Credentials cache hit", tenant_id=tenant_id, kind=kind.value)
            return _credentials_cache[cache_key]

        record = await self.get_record(tenant_id, kind)
        if not record:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No {kind.value} credentials configured for this tenant",
            )

        credentials = {**record.settings, **self._read_secret(record.secret_arn)}
        _credentials_cache[cache_key] = credentials
        return credentials

    async def get_powershell_credentials(
        self, tenant_id: str
    ) -> PowerShellCertificateCredentials:
        credentials = await self.get_credentials(tenant_id, CredentialKind.POWERSHELL)
        tenant = await self.session.get(CustomerTenant, tenant_id)
        if tenant is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found"
            )
        return PowerShellCertificateCredentials(
            **credentials, azure_tenant_id=tenant.azure_tenant_id
        )

    async def get_connectwise_credentials(self, tenant_id: str) -> ConnectWiseCredentials:
        credentials = await self.get_credentials(tenant_id, CredentialKind.CONNECTWISE)
        return ConnectWiseCredentials(**credentials)

    async def get_threecx_credentials(self, tenant_id: str) -> ThreeCXCredentials:
        credentials = await self.get_credentials(tenant_id, CredentialKind.THREECX)
        return ThreeCXCredentials(**credentials)

    async def delete_credentials(self, tenant_id: str, kind: CredentialKind) -> bool:
        """
        Delete credentials from Secrets Manager and deactivate the record.

        Returns:
            True if deleted, False if not found
        """
        record = await self.get_record(tenant_id, kind)
        if not record:
            return False

        try:
            self.secrets_client.delete_secret(
                SecretId=record.secret_arn, ForceDeleteWithoutRecovery=True
            )
            logger.info(
                "Deleted secret from Secrets Manager",
                tenant_id=tenant_id,
                kind=kind.value,
            )
        except ClientError as e:
            logger.warning(
                "Failed to delete secret (may not exist)",
                tenant_id=tenant_id,
                kind=kind.value,
                error=str(e),
            )

        record.is_active = False
        await self.session.flush()
        _credentials_cache.pop((tenant_id, kind), None)
        return True

    def _create_secret(
        self, tenant_id: str, kind: CredentialKind, secrets: dict[str, str]
    ) -> str:
        secret_name = self._generate_secret_name(tenant_id, kind)
        secret_value = json.dumps({"kind": kind.value, "secrets": secrets})
        try:
            response = self.secrets_client.create_secret(
                Name=secret_name,
                Description=f"{kind.value} credentials for tenant {tenant_id}",
                SecretString=secret_value,
            )
            logger.info(
                "Created secret in Secrets Manager",
                tenant_id=tenant_id,
                kind=kind.value,
            )
            return response["ARN"]
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceExistsException":
                logger.error(
                    "Failed to create secret",
                    tenant_id=tenant_id,
                    kind=kind.value,
                    error=str(e),
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to store credentials",
                ) from e

        # Left behind by an earlier delete: overwrite it
        self.secrets_client.put_secret_value(
            SecretId=secret_name, SecretString=secret_value
        )
        return self.secrets_client.describe_secret(SecretId=secret_name)["ARN"]

    def _put_secret(
        self, secret_arn: str, kind: CredentialKind, secrets: dict[str, str]
    ) -> None:
        try:
            self.secrets_client.put_secret_value(
                SecretId=secret_arn,
                SecretString=json.dumps({"kind": kind.value, "secrets": secrets}),
            )
        except ClientError as e:
            logger.error("Failed to update secret", kind=kind.value, error=str(e))
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to store credentials",
            ) from e

    def _read_secret(self, secret_arn: str) -> dict[str, str]:
        try:
            response = self.secrets_client.get_secret_value(SecretId=secret_arn)
        except ClientError as e:
            logger.error("Failed to retrieve secret", error=str(e))
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to retrieve credentials",
            ) from e
        return json.loads(response["SecretString"]).get("secrets", {})

    def _generate_secret_name(self, tenant_id: str, kind: CredentialKind) -> str:
        environment = get_app_settings().environment.value
        prefix = get_credentials_settings().secret_prefix
        return f"{prefix}/{environment}/{kind.value}/{tenant_id}"
