"""Start the waitlist API server."""

import argparse
from pathlib import Path

from dotenv import load_dotenv


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run the waitlist signup API")
    parser.add_argument("--host", help="Override SERVER_HOST")
    parser.add_argument("--port", type=int, help="Override SERVER_PORT")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args(argv)

    # Load environment variables before importing settings
    load_dotenv(Path.cwd() / ".env")

    import uvicorn

    from config.settings import get_settings
    from waitlist.utils.logging import setup_logging

    settings = get_settings()
    setup_logging(
        level=settings.logging.level,
        format=settings.logging.format,
        file=settings.logging.file,
        rotate_size_mb=settings.logging.rotate_size_mb,
        retain_count=settings.logging.retain_count,
    )

    host = args.host or settings.server.host
    port = args.port or settings.server.port

    print("Starting Waitlist Signup API...")
    print(f"Endpoint: http://localhost:{port}{settings.server.route_prefix}")
    print()

    uvicorn.run(
        "waitlist.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
