#!/usr/bin/env python3
"""
Diagnose a seed's IMAP configuration.

Resolves the connection parameters, then walks connect -> login -> select ->
search without fetching or storing anything, and reports where it fails.
"""

import asyncio
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


async def diagnose_seed(seed_id: str):
    """Diagnose IMAP connectivity for a specific seed"""
    from core.config import get_settings
    from core.database import AsyncSessionLocal
    from core.exceptions import ConfigurationError, ConnectivityError
    from integrations.imap.encryption import CredentialEncryptor
    from integrations.imap.factory import ImapClientFactory
    from repositories.email_seed_repo import EmailSeedRepository

    settings = get_settings()

    async with AsyncSessionLocal() as db:
        seed = await EmailSeedRepository(db).get_by_id(seed_id)

        if not seed:
            print(f"❌ Seed not found: {seed_id}")
            return

        print(f"\n{'='*60}")
        print(f"📧 Seed Diagnosis: {seed.email}")
        print(f"{'='*60}\n")

        print(f"Provider: {seed.provider}")
        print(f"Status: {'✅ Active' if seed.is_active else '❌ Inactive'}")
        print(f"Last Sync: {seed.last_sync_at or 'Never'}")
        print()

        try:
            params = ImapClientFactory.resolve_connection_params(
                seed, default_port=settings.imap_default_port
            )
        except ConfigurationError as e:
            print(f"❌ {e}")
            print("   Set imap_host on the seed (required for imap_custom)")
            return
        print(f"Server: {params.host}:{params.port} (TLS: {params.use_tls})")

        if not seed.encrypted_password:
            print("❌ No password stored; run a sync from the dashboard with the password")
            return
        try:
            password = CredentialEncryptor().decrypt(seed.encrypted_password)
        except ValueError as e:
            print(f"❌ {e}")
            print("   This may indicate encryption key (SECRET_KEY/ENCRYPTION_SALT) changes")
            return

    client = ImapClientFactory.create_client(params)
    try:
        await client.connect()
        print("✅ Connected")

        if not await client.login(seed.email, password):
            print("❌ Login rejected")
            print("   Gmail/Yahoo/Outlook usually require an app password for IMAP")
            return
        print("✅ Logged in")

        total = await client.select_mailbox(settings.imap_default_mailbox)
        unseen = await client.search_unseen()
        print(f"✅ {settings.imap_default_mailbox}: {total} messages, {len(unseen)} unseen")
    except ConnectivityError as e:
        print(f"❌ Connection failed: {e}")
    finally:
        await client.logout()
        await client.close()


def main():
    """CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description="Diagnose a seed's IMAP configuration")
    parser.add_argument("seed_id", help="Seed ID to diagnose")

    args = parser.parse_args()

    asyncio.run(diagnose_seed(args.seed_id))


if __name__ == "__main__":
    main()
