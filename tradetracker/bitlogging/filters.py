import logging
import re
from typing import Any, Iterable


_SIGNATURE_RE = re.compile(r'(signature=)[0-9a-fA-F]+')

_exception_formatter = logging.Formatter()


class SecretRedactingFilter(logging.Filter):
    """Scrubs known secrets and request signatures out of everything a handler may write: the
    rendered message, the event data and any exception text.
    """

    def __init__(self, secrets: Iterable[str] = ()):
        super(SecretRedactingFilter, self).__init__()
        self._secrets = [s for s in secrets if s]

    def redact(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, '***')
        return _SIGNATURE_RE.sub(r'\1***', text)

    def scrub(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.redact(value)
        if isinstance(value, dict):
            return {k: self.scrub(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self.scrub(v) for v in value]
        if isinstance(value, tuple):
            return tuple(self.scrub(v) for v in value)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        message = self.redact(record.getMessage())
        record.msg, record.args = message, ()

        # Replace, don't mutate, the caller's dict
        if hasattr(record, 'event_data'):
            record.event_data = self.scrub(record.event_data)

        if record.exc_info and not record.exc_text:
            record.exc_text = _exception_formatter.formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self.redact(record.exc_text)
        return True
