"""CLI entry point: python main.py --port 8000"""

import argparse

import uvicorn

from moodchat.settings import get_settings


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="MoodChat - real-time chat with presence and mood tagging"
    )
    parser.add_argument(
        "--host", default=settings.host,
        help=f"Interface to bind (default: {settings.host})"
    )
    parser.add_argument(
        "--port", type=int, default=settings.port,
        help=f"Port to listen on (default: {settings.port})"
    )
    parser.add_argument(
        "--reload", action="store_true",
        help="Reload on code changes (development only)"
    )
    args = parser.parse_args()

    uvicorn.run(
        "moodchat.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        ws_per_message_deflate=False,
    )


if __name__ == "__main__":
    main()
