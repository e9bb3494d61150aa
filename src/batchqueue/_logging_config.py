# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import logging.handlers
import os
import sys
from pathlib import Path

"""
Provide default logging setup for batchqueue clients (scripts, notebooks, tests)
"""

LOG_DATE_FORMAT = "%m/%d/%Y %I:%M:%S %p"
LOG_FORMAT = "%(levelname)s | %(asctime)-15s | %(message)s"
CORE_LOG_FILE = "batchqueue_core.log"
CORE_LOG_FILE_MAX_BYTES = 5000000
CORE_LOG_FILE_BACKUP_COUNT = 5

# AWS SDK loggers dump every request/response at DEBUG, which would bury job queue status transitions
AWS_SDK_LOGGERS = ["boto3", "botocore", "urllib3"]


def init_basic_logging(log_dir=None, enable_console_logging=True, root_level=logging.INFO, aws_sdk_level=logging.WARNING):
    logger = logging.getLogger()
    logger.setLevel(root_level)

    for sdk_logger in AWS_SDK_LOGGERS:
        logging.getLogger(sdk_logger).setLevel(aws_sdk_level)

    if enable_console_logging:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(root_level)
        console.setFormatter(logging.Formatter("%(asctime)s - %(name)-13s: %(levelname)-8s %(message)s"))
        logger.addHandler(console)

    # file handler keeps everything the root level lets through
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        rotating_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_dir / CORE_LOG_FILE), maxBytes=CORE_LOG_FILE_MAX_BYTES, backupCount=CORE_LOG_FILE_BACKUP_COUNT
        )
        rotating_handler.setLevel(logging.DEBUG)
        rotating_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(rotating_handler)

    # refer
    #   https://docs.python.org/3/library/logging.html#logging.basicConfig
    # no-op if handlers were attached above
    logging.basicConfig(format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, level=root_level)

    return logger
