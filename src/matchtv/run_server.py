import logging

from .schedule_cache import ScheduleCache
from .schedule_config import HOST, LOG_LEVEL, PORT
from .web_app import create_app

logger = logging.getLogger(__name__)


def main():
    """Loads the schedule once, then serves it over HTTP."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    logger.info("--- Starting match schedule server ---")

    # 1. Initial load, before any request is accepted
    cache = ScheduleCache()
    if not cache.refresh():
        logger.warning("Initial schedule refresh failed; serving an empty schedule until a retry succeeds.")

    # 2. Serve
    app = create_app(cache)
    logger.info(f"Server listening on {HOST}:{PORT}")
    app.run(host=HOST, port=PORT, debug=False, threaded=True)


if __name__ == "__main__":
    main()
