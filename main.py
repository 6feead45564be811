"""Main entry point for the site configuration service."""
from __future__ import annotations

import sys

# Load environment variables from .env early so the settings loader can see them
from dotenv import load_dotenv

load_dotenv()

from app.startup import run_application  # noqa: E402


def main() -> None:
    """Application entry point."""
    sys.exit(run_application())


__all__ = ["main"]

if __name__ == "__main__":
    main()
