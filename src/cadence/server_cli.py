"""CLI entry point for the cadence API server."""

import argparse
import os


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="cadence-server",
        description="cadence API server: event and build orchestration",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    parser.add_argument(
        "--local",
        action="store_true",
        help="Local dev mode: SQLite database",
    )
    parser.add_argument(
        "--plugins",
        metavar="DOTTED.PATH",
        help="Factory returning the SCM/config parser/bookend/executor bundle",
    )
    args = parser.parse_args(argv)

    if args.local:
        os.environ["CADENCE_LOCAL_MODE"] = "1"

    import uvicorn

    from cadence.main import create_app
    from cadence.plugins import import_plugins

    plugins = import_plugins(args.plugins) if args.plugins else None
    uvicorn.run(create_app(plugins), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
