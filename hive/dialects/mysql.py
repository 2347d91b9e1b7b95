"""MySQL dialect."""

import logging
import urllib.parse
from typing import ClassVar

from .base import Dialect

logger = logging.getLogger(__name__)


class MysqlDialect(Dialect):
    """Dialect for MySQL (scheme mysql)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("mysql",)
    PLACEHOLDER: ClassVar[str] = "%s"
    QUOTE: ClassVar[str] = "`"
    EMPTY_INSERT: ClassVar[str] = "() VALUES ()"
    SUPPORTS_LIMITED_WRITES: ClassVar[bool] = True

    def connect(self, url: str):
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        parsed = urllib.parse.urlparse(url)
        logger.info("Connecting to MySQL database %s on %s", parsed.path[1:], parsed.hostname)
        return pymysql.connect(
            host=parsed.hostname,
            user=parsed.username,
            password=parsed.password,
            database=(parsed.path or "")[1:] or None,
            port=parsed.port or 3306,
        )
