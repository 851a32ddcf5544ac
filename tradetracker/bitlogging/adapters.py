import logging


class BitLoggerAdapter(logging.LoggerAdapter):
    """Accepts ``event_name`` and ``event_data`` keyword arguments on every log call. The event
    data is attached to the record and used to fill in ``{placeholders}`` in the message.
    """

    def __init__(self, logger):
        super(BitLoggerAdapter, self).__init__(logger, {'event_name': '', 'event_data': {}})

    def log(self, level, msg, *args, **kwargs):
        if self.isEnabledFor(level):
            extra = {
                'event_name': kwargs.pop('event_name', ''),
                'event_data': kwargs.pop('event_data', {}),
            }
            msg = self._format_message(msg, extra['event_data'])
            kwargs['extra'] = extra
            self.logger._log(level, msg, args, **kwargs)

    @staticmethod
    def _format_message(msg, event_data: dict) -> str:
        try:
            return str(msg).format(**event_data)
        except (IndexError, KeyError, ValueError):
            return str(msg)
