import logging, os, sys

from .utils.smart_logger import LogLevel, configure_logging


def setup_logging():
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    # Log to stdout (captured by the container runtime)
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(logging.Formatter('%(asctime)s | %(levelname)s | %(name)s | %(message)s'))
    root.addHandler(sh)

    logging.captureWarnings(True)

    # Verbosity of the smart loggers follows BOT_LOG_LEVEL
    bot_level = getattr(LogLevel, os.getenv("BOT_LOG_LEVEL", "STANDARD").upper(), LogLevel.STANDARD)
    configure_logging(level=bot_level)

    for name in (
        "scout_bot",                        # whole package
        "scout_bot.orchestrator",           # tool rounds
        "scout_bot.routes.chat",            # chat endpoint decisions
        "gunicorn.error",
        "gunicorn.access",
    ):
        logging.getLogger(name).setLevel(level)
