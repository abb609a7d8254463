"""Pydantic schemas for seed management and IMAP sync"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from core.enums import SeedProvider


class EmailSeedCreate(BaseModel):
    """Schema for registering a seed mailbox"""
    name: str = Field(..., min_length=1)
    email: str
    provider: str  # gmail, outlook, yahoo, imap_custom
    imap_host: Optional[str] = None
    imap_port: Optional[int] = Field(default=None, ge=1, le=65535)
    use_ssl: Optional[bool] = None
    password: Optional[str] = None  # Will be encrypted before storage

    @field_validator('provider')
    @classmethod
    def validate_provider(cls, v: str) -> str:
        supported = SeedProvider.values()
        if v.lower() not in supported:
            raise ValueError(
                f"Provider must be one of: {supported}. Got: {v}"
            )
        return v.lower()

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        if '@' not in v:
            raise ValueError("Invalid email address")
        return v.strip().lower()

    @model_validator(mode='after')
    def validate_custom_host(self) -> 'EmailSeedCreate':
        """Custom IMAP providers have no default host"""
        if self.provider == SeedProvider.IMAP_CUSTOM.value and not self.imap_host:
            raise ValueError("imap_host is required for imap_custom seeds")
        return self


class EmailSeedResponse(BaseModel):
    """Schema for seed responses (password excluded)"""
    id: str
    user_id: str
    name: str
    email: str
    provider: str
    imap_host: Optional[str]
    imap_port: Optional[int]
    use_ssl: Optional[bool]
    is_active: bool
    last_sync_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SeedSyncRequest(BaseModel):
    """Schema for triggering a seed sync"""
    password: Optional[str] = None


class SyncDetails(BaseModel):
    """Connection details echoed back after a sync"""
    host: str
    port: int
    email: str
    last_sync: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SeedSyncResponse(BaseModel):
    """Schema for sync results, serialized in camelCase for the dashboard"""
    success: bool = True
    synced_count: int
    total_unseen: int
    details: SyncDetails

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CapturedNewsletterResponse(BaseModel):
    """Schema for a captured newsletter"""
    id: str
    seed_id: Optional[str]
    from_email: str
    from_name: Optional[str]
    subject: str
    received_at: datetime
    html_content: Optional[str]
    text_content: Optional[str]
    is_processed: bool

    model_config = ConfigDict(from_attributes=True)
