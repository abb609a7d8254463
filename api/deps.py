from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import verify_token
from core.config import get_settings
from core.database import get_db, get_db_transactional
from integrations.imap.encryption import CredentialEncryptor
from integrations.imap.factory import ImapClientFactory
from repositories.captured_newsletter_repo import CapturedNewsletterRepository
from repositories.email_seed_repo import EmailSeedRepository
from schemas.token import TokenPayload
from services.seed_sync_service import SeedSyncService

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> TokenPayload:
    """
    Validate JWT token and return authenticated user payload.
    Token must contain the 'sub' (user_id) claim.
    """
    try:
        payload = verify_token(credentials.credentials)
        token_data = TokenPayload(**payload)
        return token_data
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_credential_encryptor() -> CredentialEncryptor:
    """Credential encryptor dependency"""
    return CredentialEncryptor()


def _build_seed_sync_service(
    db: AsyncSession, encryptor: CredentialEncryptor
) -> SeedSyncService:
    """Internal helper to construct SeedSyncService with all dependencies"""
    settings = get_settings()
    return SeedSyncService(
        seed_repo=EmailSeedRepository(db),
        newsletter_repo=CapturedNewsletterRepository(db),
        encryptor=encryptor,
        client_factory=ImapClientFactory(),
        max_messages=settings.imap_sync_max_messages,
        mailbox=settings.imap_default_mailbox,
        default_port=settings.imap_default_port,
    )


async def get_seed_repo(db: AsyncSession = Depends(get_db)) -> EmailSeedRepository:
    """Seed repository dependency"""
    return EmailSeedRepository(db)


async def get_newsletter_repo(
    db: AsyncSession = Depends(get_db),
) -> CapturedNewsletterRepository:
    """Captured newsletter repository dependency"""
    return CapturedNewsletterRepository(db)


# Transactional dependencies for write operations
async def get_seed_repo_transactional(
    db: AsyncSession = Depends(get_db_transactional),
) -> EmailSeedRepository:
    """Seed repository dependency with transaction management"""
    return EmailSeedRepository(db)


async def get_seed_sync_service_transactional(
    db: AsyncSession = Depends(get_db_transactional),
    encryptor: CredentialEncryptor = Depends(get_credential_encryptor),
) -> SeedSyncService:
    """Seed sync service dependency with transaction management"""
    return _build_seed_sync_service(db, encryptor)
