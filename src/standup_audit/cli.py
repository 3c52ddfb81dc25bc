from __future__ import annotations

import logging
import sys

from .auditor import StandupAuditor
from .config import load_config
from .log import setup_logging
from .slack_client import SlackAPI

logger = logging.getLogger(__name__)


def main() -> None:
    """Run a single stand-up audit pass; any fatal error exits with status 1."""

    setup_logging()

    try:
        cfg = load_config()
        setup_logging(cfg.log_level)

        slack = SlackAPI(token=cfg.slack_token)
        StandupAuditor(cfg, slack).run()
    except RuntimeError as e:
        logger.critical("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
