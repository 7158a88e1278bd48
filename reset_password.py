#!/usr/bin/env python3
"""
Reset an account's password in the Lessons API SQLite store.

The script never reads or prints existing passwords.  It looks the
account up by email (case-insensitive) and overwrites its password.

Usage:
    python reset_password.py --db ./lessons.db --email admin@example.com --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import os
import sys

from lessons_api.app.core.db import SQLiteStorage
from lessons_api.app.core.store import LocalStore
from lessons_api.app.services.account_service import AccountService


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Reset a Lessons API account password (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./lessons.db)")
    ap.add_argument("--email", required=True, help="Account email to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    ap.add_argument("--namespace", default=None, help="Storage namespace (default: STORAGE_NAMESPACE or lessonsuk)")
    args = ap.parse_args(argv)

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        return 1

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        return 1

    store = LocalStore(SQLiteStorage(os.path.abspath(args.db)), args.namespace)
    account = AccountService(store).set_password(args.email, new_password)
    if account is None:
        print(f"[!] No account found with email: {args.email}", file=sys.stderr)
        return 2

    print(f"[+] Password updated for account: {account.email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
