#!/usr/bin/env python3
"""
Sync every active seed mailbox over IMAP.

Intended to run periodically (cron / scheduler). Each seed is synced with its
stored password in its own IMAP session; a failing seed is reported and the
run continues with the next one.
"""

import argparse
import asyncio
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


async def sync_active_seeds(max_messages: int | None = None) -> int:
    """Run one batch sync; returns the number of failed seeds"""
    from core.config import get_settings
    from core.database import AsyncSessionLocal
    from core.logging import setup_logging
    from integrations.imap.encryption import CredentialEncryptor
    from integrations.imap.factory import ImapClientFactory
    from repositories.captured_newsletter_repo import CapturedNewsletterRepository
    from repositories.email_seed_repo import EmailSeedRepository
    from services.seed_sync_service import SeedSyncService

    setup_logging()
    settings = get_settings()

    async with AsyncSessionLocal.begin() as db:
        service = SeedSyncService(
            seed_repo=EmailSeedRepository(db),
            newsletter_repo=CapturedNewsletterRepository(db),
            encryptor=CredentialEncryptor(),
            client_factory=ImapClientFactory(),
            max_messages=max_messages or settings.imap_sync_max_messages,
            mailbox=settings.imap_default_mailbox,
            default_port=settings.imap_default_port,
        )
        outcomes = await service.sync_active_seeds()

    print(f"\n{'='*60}")
    print(f"Synced {len(outcomes)} active seeds")
    print(f"{'='*60}")
    for outcome in outcomes:
        marker = "✅" if outcome.success else "❌"
        print(f"{marker} {outcome.seed_id}: {outcome.message}")

    return sum(1 for outcome in outcomes if not outcome.success)


def main():
    """CLI entry point"""
    parser = argparse.ArgumentParser(description="Sync all active seed mailboxes")
    parser.add_argument(
        "--max-messages",
        type=int,
        default=None,
        help="Cap on messages fetched per seed (defaults to IMAP_SYNC_MAX_MESSAGES)",
    )

    args = parser.parse_args()

    failures = asyncio.run(sync_active_seeds(args.max_messages))
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
