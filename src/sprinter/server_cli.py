"""CLI entry point for the Sprinter API server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="sprinter-server",
        description="Sprinter API server",
    )
    parser.add_argument("--host", default=None, help="Bind host (default: SPRINTER_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: SPRINTER_PORT or 8080)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database, console logs",
    )
    args = parser.parse_args(argv)

    if args.local:
        os.environ["SPRINTER_LOCAL_MODE"] = "1"
        os.environ.setdefault("SPRINTER_JSON_LOGS", "0")

    # Settings are read once at import, so only after the environment is final
    import uvicorn

    from sprinter.config import settings

    uvicorn.run("sprinter.main:app", host=args.host or settings.host, port=args.port or settings.port)


if __name__ == "__main__":
    main()
