from models.captured_newsletter import CapturedNewsletter
from models.email_seed import EmailSeed

# Mixins for model composition
from models.mixins import (
    CuidMixin,
    TimestampMixin,
    UserOwnedMixin,
    UserOwnedModel,
)

__all__ = [
    # Models
    "EmailSeed",
    "CapturedNewsletter",
    # Mixins
    "CuidMixin",
    "UserOwnedMixin",
    "TimestampMixin",
    "UserOwnedModel",
]
