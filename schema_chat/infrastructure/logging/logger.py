"""JSON-lines 文件日志。

每条记录一行 JSON：ts / level / name / msg，以及调用方通过
extra={"extra": {...}} 附加的结构化字段。
开启 log_redact_content 时，用户查询与提示词等内容经 redact() 替换为长度摘要。
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from schema_chat.config.settings import settings


LOGGER_NAME = "schema_chat"
LOG_FILE = "schema_chat.log"


def redact(text: str) -> str:
    """返回可写入日志的内容；开启脱敏时只保留长度。"""

    text = text or ""
    if settings.log_redact_content:
        return f"<redacted {len(text)} chars>"
    return text


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return logger
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(log_dir / LOG_FILE, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(JsonLineFormatter())
    logger.addHandler(fh)
    return logger


logger = setup_logger()
