#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Console (and optional file) output for the filament_bending loggers. The
library itself only creates loggers, scripts driving a solve call
setup_logging once.
"""


import logging
import sys


PACKAGE_LOGGER = 'filament_bending'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%H:%M:%S'


def setup_logging(level=logging.INFO, log_file=None):
    """route package log records to stdout and, if given, to log_file
    logging.DEBUG shows every solver iteration"""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    # repeated calls replace the handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w',
                                            encoding='utf-8'))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
