from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


DEFAULT_FMT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_FMT = "%(asctime)s | %(levelname)s | %(message)s"

# 요청/응답 상태 로그는 robinhood 로거(DEBUG)에서 나옴
HTTP_LOGGER = "robinhood"
APP_LOGGERS = ("session", "cli")


def _level(v: int | str) -> int:
    if isinstance(v, int):
        return v
    lv = logging.getLevelName(v.upper())
    if not isinstance(lv, int):
        raise ValueError(f"unknown log level: {v!r}")
    return lv


def _file_handler(log_dir: str, filename: str, max_bytes: int, backup_count: int) -> logging.Handler:
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    fh = RotatingFileHandler(
        Path(log_dir) / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(DEFAULT_FMT))
    return fh


def setup(
    log_dir: str = "logs",
    console_level: int | str = logging.INFO,
    http_debug: bool = True,
    filename: str = "optiontrade.log",
    max_bytes: int = 5_000_000,
    backup_count: int = 3,
) -> None:
    """
    콘솔(console_level) + 회전 파일(DEBUG) 핸들러 설치.
    핸들러는 한 번만 붙이고, 로거 레벨은 호출할 때마다 다시 적용.
    """
    root = logging.getLogger()
    if not getattr(root, "_optiontrade_logging_installed", False):
        root.setLevel(logging.DEBUG)
        ch = logging.StreamHandler()
        ch.setLevel(_level(console_level))
        ch.setFormatter(logging.Formatter(CONSOLE_FMT))
        root.addHandler(ch)
        root.addHandler(_file_handler(log_dir, filename, max_bytes, backup_count))
        root._optiontrade_logging_installed = True  # type: ignore[attr-defined]

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger(HTTP_LOGGER).setLevel(logging.DEBUG if http_debug else logging.INFO)
    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO)


def setup_from_settings(s, log_dir: str | None = None) -> None:
    setup(
        log_dir=log_dir or s.log.dir,
        console_level=s.log.console_level,
        http_debug=s.log.http_debug,
    )
