"""
日志模块
"""
import contextvars
import logging
import os
import sys


_query_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("wb_provider_query", default="-")

# 日志文件存放在项目根目录的 logs/ 目录下
LOGS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "logs")
DEFAULT_LOG_FILE = os.path.join(LOGS_DIR, "wb_provider.log")

# Log level mapping from string to logging constant
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_log_level(configured: str | None = None) -> int:
    """WB_PROVIDER_LOG_LEVEL / LOG_LEVEL win over the level from config.json."""
    level_str = os.environ.get("WB_PROVIDER_LOG_LEVEL") or os.environ.get("LOG_LEVEL") or configured or "INFO"
    return LOG_LEVEL_MAP.get(level_str.upper(), logging.INFO)


def get_log_level_from_env() -> int:
    """Get log level from environment variable WB_PROVIDER_LOG_LEVEL or LOG_LEVEL."""
    return resolve_log_level()


def set_log_level(level: int | str) -> None:
    """Change the level of the provider logger and all of its handlers."""
    if isinstance(level, str):
        level = LOG_LEVEL_MAP.get(level.upper(), logging.INFO)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def set_query(name: str | None) -> contextvars.Token:
    """Tag log records emitted by the current task with a query name.

    Returns the token needed by reset_query(); each asyncio task has its own
    copy of the context, so concurrent queries never see each other's tag.
    """
    return _query_ctx.set(name or "-")


def reset_query(token: contextvars.Token) -> None:
    _query_ctx.reset(token)


def current_query() -> str:
    return _query_ctx.get()


class InjectQueryFilter(logging.Filter):
    """Injects the current query into LogRecord, defaulting to '-'"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.query = _query_ctx.get()
        return True


def setup_logger(name="wb_provider", level=None, log_file=None):
    """配置并返回日志记录器

    Args:
        name: Logger name
        level: Log level (if None, read from environment variable)
        log_file: Log file path (if None, use default in logs/ directory)
    """
    if level is None:
        level = get_log_level_from_env()

    if log_file is None:
        os.makedirs(LOGS_DIR, exist_ok=True)
        log_file = DEFAULT_LOG_FILE

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not any(isinstance(f, InjectQueryFilter) for f in logger.filters):
        logger.addFilter(InjectQueryFilter())

    # 防止重复添加处理器
    if logger.hasHandlers():
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - [%(query)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # 文件处理器
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # 控制台处理器
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


logger = setup_logger()
