"""Seed API endpoints: registration, lookup and IMAP sync"""
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.params import Query

from api.deps import (
    get_credential_encryptor,
    get_current_user,
    get_newsletter_repo,
    get_seed_repo,
    get_seed_repo_transactional,
    get_seed_sync_service_transactional,
)
from core.config import get_settings
from core.exceptions import SeedNotFoundError
from core.logging import get_logger
from core.rate_limit import limiter
from integrations.imap.encryption import CredentialEncryptor
from models.email_seed import EmailSeed
from repositories.captured_newsletter_repo import CapturedNewsletterRepository
from repositories.email_seed_repo import EmailSeedRepository
from schemas.email_seed import (
    CapturedNewsletterResponse,
    EmailSeedCreate,
    EmailSeedResponse,
    SeedSyncRequest,
    SeedSyncResponse,
    SyncDetails,
)
from schemas.token import TokenPayload
from services.seed_sync_service import SeedSyncService

logger = get_logger(__name__)
router = APIRouter()
settings = get_settings()


async def _get_owned_seed(
    seed_repo: EmailSeedRepository, seed_id: str, user: TokenPayload
) -> EmailSeed:
    seed = await seed_repo.get_by_id_and_user(seed_id, user.sub)
    if not seed:
        raise SeedNotFoundError("Seed not found or access denied")
    return seed


@router.post("/", response_model=EmailSeedResponse, status_code=status.HTTP_201_CREATED)
async def create_seed(
    data: EmailSeedCreate,
    user: Annotated[TokenPayload, Depends(get_current_user)],
    seed_repo: Annotated[EmailSeedRepository, Depends(get_seed_repo_transactional)],
    encryptor: Annotated[CredentialEncryptor, Depends(get_credential_encryptor)],
):
    """Register a seed mailbox"""
    seed = EmailSeed(
        user_id=user.sub,
        name=data.name,
        email=data.email,
        provider=data.provider,
        imap_host=data.imap_host,
        imap_port=data.imap_port,
        use_ssl=data.use_ssl,
        encrypted_password=encryptor.encrypt(data.password) if data.password else None,
        is_active=True,
    )
    seed = await seed_repo.create(seed)

    logger.info(f"Created seed: {seed.email} (provider: {seed.provider})")
    return EmailSeedResponse.model_validate(seed)


@router.get("/", response_model=list[EmailSeedResponse])
async def list_seeds(
    user: Annotated[TokenPayload, Depends(get_current_user)],
    seed_repo: Annotated[EmailSeedRepository, Depends(get_seed_repo)],
    skip: Annotated[int, Query(ge=0, description="Number of records to skip")] = 0,
    limit: Annotated[int, Query(ge=1, le=1000, description="Max records to return")] = 100,
):
    """List the caller's seeds"""
    seeds = await seed_repo.get_by_user(user.sub, skip=skip, limit=limit)
    return [EmailSeedResponse.model_validate(seed) for seed in seeds]


@router.get("/{seed_id}", response_model=EmailSeedResponse)
async def get_seed(
    seed_id: str,
    user: Annotated[TokenPayload, Depends(get_current_user)],
    seed_repo: Annotated[EmailSeedRepository, Depends(get_seed_repo)],
):
    """Get a specific seed by ID"""
    seed = await _get_owned_seed(seed_repo, seed_id, user)
    return EmailSeedResponse.model_validate(seed)


@router.delete("/{seed_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_seed(
    seed_id: str,
    user: Annotated[TokenPayload, Depends(get_current_user)],
    seed_repo: Annotated[EmailSeedRepository, Depends(get_seed_repo_transactional)],
):
    """Deactivate a seed; its captured newsletters are kept"""
    seed = await _get_owned_seed(seed_repo, seed_id, user)
    await seed_repo.deactivate(seed)


@router.post("/{seed_id}/sync", response_model=SeedSyncResponse)
@limiter.limit(settings.sync_rate_limit)
async def sync_seed(
    request: Request,  # Required for slowapi
    seed_id: str,
    sync_request: SeedSyncRequest,
    user: Annotated[TokenPayload, Depends(get_current_user)],
    sync_service: Annotated[SeedSyncService, Depends(get_seed_sync_service_transactional)],
):
    """
    Pull unseen mail from the seed's mailbox over IMAP.

    Errors are returned as {"error": message}: 404 unknown seed, 400 missing
    host/password, 401 rejected IMAP login, 502 connection failure.
    """
    result = await sync_service.sync_seed(
        user_id=user.sub, seed_id=seed_id, password=sync_request.password
    )
    return SeedSyncResponse(
        success=True,
        synced_count=result.synced_count,
        total_unseen=result.total_unseen,
        details=SyncDetails(
            host=result.host,
            port=result.port,
            email=result.email,
            last_sync=result.last_sync,
        ),
    )


@router.get("/{seed_id}/newsletters", response_model=list[CapturedNewsletterResponse])
async def list_captured_newsletters(
    seed_id: str,
    user: Annotated[TokenPayload, Depends(get_current_user)],
    seed_repo: Annotated[EmailSeedRepository, Depends(get_seed_repo)],
    newsletter_repo: Annotated[CapturedNewsletterRepository, Depends(get_newsletter_repo)],
    skip: Annotated[int, Query(ge=0, description="Number of records to skip")] = 0,
    limit: Annotated[int, Query(ge=1, le=1000, description="Max records to return")] = 100,
):
    """List newsletters captured by one of the caller's seeds, newest first"""
    seed = await _get_owned_seed(seed_repo, seed_id, user)
    newsletters = await newsletter_repo.get_by_seed(seed.id, skip=skip, limit=limit)
    return [CapturedNewsletterResponse.model_validate(n) for n in newsletters]
