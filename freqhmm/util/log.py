import logging
import sys

from .. import config


def logger(name='freqhmm', pattern='%(asctime)s %(levelname)s %(name)s: %(message)s',
           date_format='%H:%M:%S', handler=None):
    """
    Retrieves the logger instance associated to the given name and attaches a formatted handler to it
    if it does not have one yet.

    :param name: The name of the logger instance.
    :type name: str
    :param pattern: The associated pattern.
    :type pattern: str
    :param date_format: The date format to be used in the pattern.
    :type date_format: str
    :param handler: The logging handler, by default console output on stderr.
    :type handler: FileHandler or StreamHandler or NullHandler

    :return: The logger.
    :rtype: Logger
    """
    _logger = logging.getLogger(name)
    _logger.setLevel(config.log_level())
    if not any(not isinstance(h, logging.NullHandler) for h in _logger.handlers):
        if handler is None:
            handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(pattern, date_format)
        handler.setFormatter(formatter)
        _logger.addHandler(handler)
        _logger.propagate = False
    for h in _logger.handlers:
        h.setLevel(config.log_level())
    return _logger
