#!/usr/bin/env python3
"""SimpleFIN setup script.

This script exchanges a SimpleFIN setup token for an access URL and links
it as a new SimpleFIN item.

Usage:
    1. Go to https://beta-bridge.simplefin.org/ and create an account
    2. Create an "app connection" to generate a setup token
    3. Run ``python -m scripts.setup_simplefin`` and paste the setup token

The setup token can only be used once - it's exchanged for a permanent
access URL that you'll use for all future API calls.
"""

import sys

from sqlalchemy.orm import Session

from integrations.exceptions import ProviderAuthError
from integrations.simplefin_client import SimpleFINClient
from models import SimplefinItem


def link_item(db: Session, setup_token: str, name: str | None = None) -> SimplefinItem:
    """Claim ``setup_token`` and store the resulting access URL as an item.

    Raises:
        ProviderAuthError: The token could not be claimed.
    """
    access_url = SimpleFINClient.claim_access_url(setup_token)
    item = SimplefinItem(name=name, access_url=access_url)
    db.add(item)
    db.commit()
    return item


def _offer_keychain_store(access_url: str) -> None:
    """Prompt the user to store the access URL as the keychain default."""
    from services.credential_manager import set_credential

    answer = input("\nAlso store the access URL in the system keychain? [y/N] ").strip().lower()
    if answer in ("y", "yes"):
        if set_credential("SIMPLEFIN_ACCESS_URL", access_url):
            print("  Stored SIMPLEFIN_ACCESS_URL in keychain")
        else:
            print("  Failed to store SIMPLEFIN_ACCESS_URL")
    else:
        print("  Skipped keychain storage.")


def main():
    """Exchange setup token for access URL and create the item."""
    print("SimpleFIN Setup")
    print("=" * 50)
    print()
    print("To get a setup token:")
    print("  1. Go to https://beta-bridge.simplefin.org/")
    print("  2. Create an account or log in")
    print("  3. Click 'New Connection' to create an app connection")
    print("  4. Connect your financial institutions")
    print("  5. Copy the setup token (base64-encoded string)")
    print()

    setup_token = input("Paste your setup token: ").strip()
    if not setup_token:
        print("Error: No setup token provided")
        sys.exit(1)
    name = input("Name for this connection (optional): ").strip() or None

    print()
    print("Exchanging setup token for access URL...")

    from database import get_session_local, init_db

    init_db()
    db = get_session_local()()
    try:
        item = link_item(db, setup_token, name=name)
    except ProviderAuthError as e:
        print(f"Error: {e}")
        print()
        print("Common issues:")
        print("  - Setup token was already used (tokens are single-use)")
        print("  - Setup token is invalid or expired")
        print("  - Network connectivity issues")
        sys.exit(1)
    else:
        print()
        print(f"Success! Linked SimpleFIN item {item.id}")
        print("Run 'python -m scripts.sync_simplefin' to import it.")
        print("Note: The setup token has now been consumed and cannot be reused.")
        _offer_keychain_store(item.access_url)
    finally:
        db.close()


if __name__ == "__main__":
    main()
