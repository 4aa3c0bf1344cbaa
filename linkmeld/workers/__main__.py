"""
Worker launcher.

Usage: python -m linkmeld.workers <queue>
"""

import sys

from dotenv import load_dotenv

# Export .env before settings load so boto3 sees AWS credentials too
load_dotenv()

from linkmeld.observability import configure_logging  # noqa: E402
from linkmeld.workers import celery_app, settings, worker_argv  # noqa: E402


def main() -> None:
    if len(sys.argv) != 2:
        raise SystemExit("usage: python -m linkmeld.workers <pdf|ai|embed>")
    configure_logging(settings.log_level)
    celery_app.worker_main(worker_argv(sys.argv[1]))


if __name__ == "__main__":
    main()
