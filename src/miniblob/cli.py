"""Command line entry point for MiniBlob.

USAGE:
    miniblob serve [--host HOST] [--port PORT] [--env-file FILE]
    miniblob token create --name NAME [--roles r1,r2] [--expires SECONDS]
    miniblob token inspect <token-string>

ENVIRONMENT:
    MINIBLOB_ROOT_PATH      Absolute storage root (required for serve)
    MINIBLOB_JWT_SECRET     JWT signing secret (shared by serve and token)
    MINIBLOB_JWT_ISSUER     Token issuer (default: miniblob)
    MINIBLOB_JWT_AUDIENCE   Token audience (default: miniblob-audience)
    MINIBLOB_INDEX_ENABLED  Enable the SQLite search index (default: false)
"""

import argparse
import json
import sys
from typing import List, Optional

import jwt

from miniblob.auth import TokenService
from miniblob.config import DEFAULT_PREFIX, AuthSettings, EnvLoader, Settings
from miniblob.exceptions import ConfigurationError, TokenValidationError
from miniblob.logger import create_logger


def _token_service(env_file: Optional[str], verbose: bool) -> TokenService:
    env = EnvLoader(env_file).load()
    auth = AuthSettings.from_env(env, DEFAULT_PREFIX)
    if not auth.jwt_secret:
        print(f"ERROR: {DEFAULT_PREFIX}_JWT_SECRET is required to issue or inspect tokens", file=sys.stderr)
        sys.exit(1)
    logger = create_logger(name="miniblob-cli", level=10 if verbose else 30)
    return TokenService(
        secret_key=auth.jwt_secret,
        issuer=auth.issuer,
        audience=auth.audience,
        logger=logger,
    )


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from miniblob.web import create_app

    overrides = {}
    if args.host:
        overrides[f"{DEFAULT_PREFIX}_HOST"] = args.host
    if args.port:
        overrides[f"{DEFAULT_PREFIX}_PORT"] = str(args.port)

    try:
        settings = Settings.from_env(env_file=args.env_file, overrides=overrides)
        app = create_app(settings)
    except ConfigurationError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        hint = e.details.get("hint")
        if hint:
            print(f"  Hint: {hint}", file=sys.stderr)
        return 1

    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log.level.lower(),
    )
    return 0


def cmd_token_create(args: argparse.Namespace) -> int:
    tokens = _token_service(args.env_file, args.verbose)
    roles: List[str] = [r.strip() for r in (args.roles or "").split(",") if r.strip()]
    print(tokens.create(name=args.name, roles=roles, expires_in_seconds=args.expires))
    return 0


def cmd_token_inspect(args: argparse.Namespace) -> int:
    tokens = _token_service(args.env_file, args.verbose)
    try:
        unverified = jwt.decode(args.token, options={"verify_signature": False})
    except jwt.DecodeError as e:
        print(f"ERROR: Invalid token format - {e}", file=sys.stderr)
        return 1

    print("=== Token Claims (unverified) ===")
    print(json.dumps(unverified, indent=2, default=str))

    print("\n=== Verification ===")
    try:
        caller = tokens.verify(args.token)
    except TokenValidationError as e:
        print(f"Status: INVALID - {e.message}")
        return 1

    print("Status: VALID")
    print(f"Name: {caller.name}")
    print(f"Roles: {', '.join(caller.roles) or '(none)'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="miniblob",
        description="Hierarchical blob store with file-resident access control",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES:
  Run the server:
    MINIBLOB_ROOT_PATH=/srv/blobs %(prog)s serve --port 8080

  Issue an admin token valid for one day:
    %(prog)s token create --name root --roles admin --expires 86400
        """,
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Optional .env file (default: ./.env when present)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging output",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP server with uvicorn")
    serve.add_argument("--host", help="Bind address (default: MINIBLOB_HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, help="Port (default: MINIBLOB_PORT or 8080)")
    serve.set_defaults(func=cmd_serve)

    token = subparsers.add_parser("token", help="Issue or inspect bearer tokens")
    token_sub = token.add_subparsers(dest="subcommand", required=True)

    create = token_sub.add_parser("create", help="Issue a signed token")
    create.add_argument("--name", required=True, help="Caller identity")
    create.add_argument("--roles", default="", help="Comma-separated role claims")
    create.add_argument(
        "--expires",
        type=int,
        default=3600,
        help="Lifetime in seconds. Default: %(default)s",
    )
    create.set_defaults(func=cmd_token_create)

    inspect = token_sub.add_parser("inspect", help="Decode and verify a token")
    inspect.add_argument("token", help="JWT string")
    inspect.set_defaults(func=cmd_token_inspect)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
