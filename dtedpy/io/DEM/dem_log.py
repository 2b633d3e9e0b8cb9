# -*- coding: utf-8 -*-
"""
Logging configuration for applications using the DTED decoders.
"""

import logging

__classification__ = "UNCLASSIFIED"

_DEFAULT_MESSAGE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def dem_logger(name='dtedpy',
               logfile=None,
               level=None,
               log_to_console=True,
               message_format=_DEFAULT_MESSAGE_FORMAT,
               date_format=_DEFAULT_DATE_FORMAT):
    """
    Attach console and/or file handlers to the named logger. Calling this
    repeatedly does not attach duplicate handlers.

    Parameters
    ----------
    name : str
        The logger name, `dtedpy` covers every module of the package.
    logfile : None|str
        File name for the log file, or `None` for no file logging. The file
        handler always records every level.
    level : None|str|int
        The logger and console level, either the name of the level or its
        integer value. Defaults to `logging.WARNING`.
    log_to_console : bool
        Whether to log to the console.
    message_format : str
    date_format : str

    Returns
    -------
    logging.Logger
    """

    logger = logging.getLogger(name)

    def has_handler(handler_type):
        # FileHandler is itself a StreamHandler, so compare exact types
        return any(type(handler) is handler_type for handler in logger.handlers)

    formatter = logging.Formatter(fmt=message_format, datefmt=date_format)

    if logfile is not None and not has_handler(logging.FileHandler):
        file_handler = logging.FileHandler(logfile, mode='a')
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    default_level = logging.WARNING
    if level is None:
        log_level = default_level
    elif isinstance(level, str):
        log_level = getattr(logging, level.upper(), None)
    else:
        log_level = level

    console_handler = logging.StreamHandler()
    try:
        logger.setLevel(log_level)
        console_handler.setLevel(log_level)
    except (TypeError, ValueError):
        logger.warning('Setting logging level to {} failed. Setting to logging.WARNING.'.format(level))
        logger.setLevel(default_level)
        console_handler.setLevel(default_level)

    if log_to_console and not has_handler(logging.StreamHandler):
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
