"""
Run the report API under uvicorn.

    python -m agenttrain.serve --port 8080
    python -m agenttrain.serve --certfile cert.pem --keyfile key.pem

Flags fall back to HOST / PORT / RELOAD / LOG_LEVEL / SSL_CERTFILE /
SSL_KEYFILE from the environment.
"""

import argparse
import os
from typing import Dict, List, Optional

import uvicorn

APP_PATH = "agenttrain.main:app"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() in {"1", "true", "yes", "on"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the training report API.")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument(
        "--reload",
        action="store_true",
        default=_env_flag("RELOAD"),
        help="Restart on code changes (development only).",
    )
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "info"))
    parser.add_argument("--certfile", default=os.getenv("SSL_CERTFILE"))
    parser.add_argument("--keyfile", default=os.getenv("SSL_KEYFILE"))
    return parser


def uvicorn_options(args: argparse.Namespace) -> Dict[str, object]:
    if bool(args.certfile) != bool(args.keyfile):
        raise SystemExit("TLS needs both --certfile and --keyfile (or neither).")

    options: Dict[str, object] = {
        "host": args.host,
        "port": args.port,
        "reload": args.reload,
        "log_level": args.log_level.lower(),
        "proxy_headers": True,
        "forwarded_allow_ips": os.getenv("FORWARDED_ALLOW_IPS", "*"),
    }
    if args.certfile:
        options["ssl_certfile"] = args.certfile
        options["ssl_keyfile"] = args.keyfile
    return options


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    uvicorn.run(APP_PATH, **uvicorn_options(args))


if __name__ == "__main__":
    main()
