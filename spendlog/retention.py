"""
CLI entrypoint for the data retention job. Run from cron, e.g.:

  python -m spendlog.retention

Or hourly: 0 * * * * cd /path/to/spendlog && .venv/bin/python -m spendlog.retention
"""

import logging
import sys

from spendlog.core.config import get_settings
from spendlog.core.database import SessionLocal
from spendlog.services.retention import run_retention

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Run retention: purge expired revocations and expired reset/verification tokens."""
    settings = get_settings()
    db = SessionLocal()
    try:
        revocations_deleted, tokens_cleared = run_retention(db, settings)
        logger.info(
            "Retention completed: revocations_deleted=%s token_pairs_cleared=%s",
            revocations_deleted,
            tokens_cleared,
        )
        return 0
    except Exception as e:
        logger.exception("Retention job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
