from __future__ import annotations

import argparse
import asyncio
import logging
import time

from .core.errors import BackendError
from .runtime.server import run
from .sdk.backend import HttpConfigBackend


def _serve(args: argparse.Namespace) -> int:
    srv = run(host=args.host, port=args.port, envelope_path=args.file, log_level=args.log_level)
    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    while True:
        time.sleep(3600)


def _check(args: argparse.Namespace) -> int:
    backend = HttpConfigBackend(args.url, timeout_s=args.timeout)
    try:
        version = asyncio.run(backend.get_remote_version())
    except BackendError as e:
        logging.getLogger("configs_provider").error("%s", e)
        return 1
    print(version)
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="configs_provider", description="configs_provider: versioned typed config tables")
    p.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="serve config envelopes over HTTP")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--file", default=None, help="envelope JSON file to publish on startup")
    serve.set_defaults(func=_serve)

    check = sub.add_parser("check", help="print the latest version published by a backend")
    check.add_argument("--url", default=None, help="backend base URL (default: $CONFIGS_BACKEND_URL)")
    check.add_argument("--timeout", type=float, default=None)
    check.set_defaults(func=_check)

    args = p.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
