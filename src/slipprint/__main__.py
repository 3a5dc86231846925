"""Entry point for running slipprint as a module."""

import logging
import sys

from slipprint.cli.render import main as render_main
from slipprint.config import settings


def main() -> int:
    """Configure logging and run the render CLI."""
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return render_main()


if __name__ == "__main__":
    sys.exit(main())
