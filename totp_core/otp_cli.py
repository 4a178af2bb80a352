#!/usr/bin/env python3
"""
otp_cli.py — `totp-setup` command line, a thin wrapper over otp_core.py

Subcommands:
- new    : create a secret, show its QR code page, confirm a code, store it
- code   : print the current TOTP code for an account
- verify : check a TOTP code for an account (exit status 0 / 1)
- uri    : print the otpauth URI of an account
- list   : list enrolled accounts
- remove : forget an account
- watch  : refresh the TOTP code every second
"""

import argparse
import logging
import re
import sys
import threading
import time
from importlib.metadata import PackageNotFoundError, version

from werkzeug.serving import make_server

from totp_backend.app import DEFAULT_ISSUER, create_app
from totp_database import db_manager

from . import otp_core
from .exceptions import TOTPError
from .qr import qr_code_data_uri

try:
    __version__ = version("totp-setup")
except PackageNotFoundError:
    # running from a source checkout that was never installed
    __version__ = "0+unknown"

logger = logging.getLogger(__name__)

CODE_FORMAT = re.compile(r"^[0-9]{6}$")


def ask(question: str) -> str:
    try:
        return input(question)
    except EOFError:
        return ""


def _require(args):
    stored = db_manager.find_secret(args.account, args.db)
    if stored is None:
        print(f"Account {args.account} not found", file=sys.stderr)
    return stored


# --- CLI command handlers ---
def cmd_new(args) -> int:
    account, issuer = args.account, args.issuer
    if db_manager.find_secret(account, args.db) is not None:
        print(f"Account {account} already exists", file=sys.stderr)
        return 1

    print(f"Creating TOTP secret for account {account}...")
    secret = otp_core.generate_base32_secret()
    uri = otp_core.format_otpauth_uri(secret, account, issuer)
    pending = {
        "issuer": issuer,
        "account": account,
        "uri": uri,
        "qr_data_uri": qr_code_data_uri(uri),
    }

    app = create_app(db_path=args.db, issuer=issuer, pending_enrolment=pending)
    server = make_server(args.host, args.port, app)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        print(f"Server Start at:  http://{args.host}:{server.server_port}/otp")
        print("Please open the QR code page in your browser and scan it with the authenticator.")

        token = ask("Please Input the code in Authenticator: ").strip()
        if not CODE_FORMAT.match(token):
            print("[-] Wrong format! Expected a 6-digit code. Shutting down server.", file=sys.stderr)
            return 1
        if not otp_core.verify_totp(token, secret):
            print("[-] Verification failed! Shutting down server.", file=sys.stderr)
            return 1

        db_manager.add_secret(account, issuer, secret, args.db)
        print("[+] Success!")
        print(f"Account {account} / {issuer} \n secret: {secret}")
        return 0
    finally:
        server.shutdown()
        thread.join()
        print("Server Shutdown")


def cmd_code(args) -> int:
    stored = _require(args)
    if stored is None:
        return 1
    now = otp_core.current_time_ms()
    code = otp_core.totp(stored.secret, now)
    print(f"TOTP: {code}  (valid ~{otp_core.seconds_remaining(now):2d}s)")
    return 0


def cmd_verify(args) -> int:
    stored = _require(args)
    if stored is None:
        return 1
    if otp_core.verify_totp(args.code, stored.secret, window=args.window):
        print(f"[{args.account}] [+] TOTP code is VALID")
        return 0
    print(f"[{args.account}] [-] TOTP code is INVALID")
    return 1


def cmd_uri(args) -> int:
    stored = _require(args)
    if stored is None:
        return 1
    print(otp_core.format_otpauth_uri(stored.secret, stored.account, stored.issuer))
    return 0


def cmd_list(args) -> int:
    secrets = db_manager.load_secrets(args.db)
    if not secrets:
        print("No accounts stored.")
    for stored in secrets:
        print(f"{stored.account}\t{stored.issuer}")
    return 0


def cmd_remove(args) -> int:
    if not db_manager.remove_secret(args.account, args.db):
        print(f"Account {args.account} not found", file=sys.stderr)
        return 1
    print(f"Removed {args.account}")
    return 0


def cmd_watch(args) -> int:
    stored = _require(args)
    if stored is None:
        return 1
    print(f"[{stored.account}] Press Ctrl+C to quit. Generating TOTP in real time...\n")
    last_code = None
    try:
        while True:
            now = otp_core.current_time_ms()
            code = otp_core.totp(stored.secret, now)
            remaining = otp_core.seconds_remaining(now)
            if code != last_code:
                print(f"TOTP: {code}  (valid ~{remaining:2d}s)")
                last_code = code
            else:
                print(f".. {remaining:2d}s left", end='\r', flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")
    return 0


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="totp-setup", description="Create & manage TOTP secrets")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--db", default=None, help="Secret store path (default: $TOTP_DB_PATH or totp-secrets.db)")
    p.add_argument("--verbose", action="store_true", help="Verbose output")
    sub = p.add_subparsers(dest="cmd", required=True)

    pn = sub.add_parser("new", help="Create a new TOTP secret and provide a web QR code")
    pn.add_argument("account", help="Account name, e.g., email / username")
    pn.add_argument("--issuer", default=DEFAULT_ISSUER, help="Application name")
    pn.add_argument("--host", default="127.0.0.1", help="Address of the QR code page")
    pn.add_argument("--port", type=int, default=3000, help="Port of the QR code page")
    pn.set_defaults(func=cmd_new)

    pc = sub.add_parser("code", help="Print the current TOTP code")
    pc.add_argument("account")
    pc.set_defaults(func=cmd_code)

    pv = sub.add_parser("verify", help="Verify a TOTP code")
    pv.add_argument("account")
    pv.add_argument("code", help="OTP code to verify")
    pv.add_argument("--window", type=int, default=otp_core.DEFAULT_WINDOW, help="Allowed +/- step window")
    pv.set_defaults(func=cmd_verify)

    pu = sub.add_parser("uri", help="Print the otpauth URI")
    pu.add_argument("account")
    pu.set_defaults(func=cmd_uri)

    pl = sub.add_parser("list", help="List stored accounts")
    pl.set_defaults(func=cmd_list)

    pr = sub.add_parser("remove", help="Remove a stored account")
    pr.add_argument("account")
    pr.set_defaults(func=cmd_remove)

    pw = sub.add_parser("watch", help="Show TOTP code in real time")
    pw.add_argument("account")
    pw.set_defaults(func=cmd_watch)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(format="[%(levelname)s] %(name)s: %(message)s")
    logging.getLogger().setLevel(logging.DEBUG if args.verbose else logging.WARNING)
    try:
        return args.func(args)
    except TOTPError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
