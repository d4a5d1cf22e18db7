import logging
import re
from typing import List, Optional


class SensitiveDataFilter(logging.Filter):
    """
    Filter để che giấu thông tin nhạy cảm trong log messages.

    Cache keys and payload dumps can end up in log lines (e.g. a user DTO with a
    password hash), so values following a sensitive field name are masked.
    """

    def __init__(
        self,
        name: str = "",
        sensitive_fields: Optional[List[str]] = None,
        replacement: str = "***REDACTED***",
    ):
        super().__init__(name)
        self.sensitive_fields = sensitive_fields or [
            "password",
            "password_hash",
            "secret",
            "token",
            "api_key",
        ]
        self.replacement = replacement
        fields = "|".join(re.escape(field) for field in self.sensitive_fields)
        # password=abc, password: abc, "password": "abc", 'password': 'abc'
        self._pattern = re.compile(
            rf"""(["']?(?:{fields})["']?\s*[=:]\s*)(["'])?([^\s,;'"}}]+)(["'])?""",
            re.IGNORECASE,
        )

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter log record, masking sensitive data.

        Args:
            record: Log record to filter

        Returns:
            True to include the record in log output
        """
        if not hasattr(record, "original_msg"):
            record.original_msg = record.msg

        message = record.getMessage()
        masked = self._pattern.sub(self._mask, message)
        if masked != message:
            record.msg = masked
            record.args = ()

        return True

    def _mask(self, match: "re.Match[str]") -> str:
        opening = match.group(2) or ""
        closing = match.group(4) or ""
        return f"{match.group(1)}{opening}{self.replacement}{closing}"
