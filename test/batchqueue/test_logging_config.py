# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import logging.handlers
import sys

import pytest

from batchqueue._logging_config import CORE_LOG_FILE, init_basic_logging


class TestLoggingConfig:
    @pytest.fixture()
    def root_logger(self):
        logger = logging.getLogger()
        handlers = list(logger.handlers)
        level = logger.level
        yield logger
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers = handlers
        logger.setLevel(level)

    def test_init_basic_logging_with_file(self, root_logger, tmp_path):
        log_dir = tmp_path / "logs"

        logger = init_basic_logging(log_dir, enable_console_logging=False, root_level=logging.DEBUG)

        assert logger is root_logger
        assert logger.level == logging.DEBUG
        assert (log_dir / CORE_LOG_FILE).exists()
        assert any(isinstance(handler, logging.handlers.RotatingFileHandler) for handler in logger.handlers)

        logging.getLogger("batchqueue.test").debug("job queue q1 is VALID")
        for handler in logger.handlers:
            handler.flush()
        assert "job queue q1 is VALID" in (log_dir / CORE_LOG_FILE).read_text()

    def test_init_basic_logging_aws_sdk_level(self, root_logger):
        init_basic_logging(enable_console_logging=False, root_level=logging.DEBUG, aws_sdk_level=logging.ERROR)

        assert logging.getLogger("botocore").level == logging.ERROR
        assert logging.getLogger("batchqueue").getEffectiveLevel() == logging.DEBUG

    def test_init_basic_logging_console_only(self, root_logger):
        handlers = list(root_logger.handlers)

        init_basic_logging(enable_console_logging=True, root_level=logging.WARNING)

        assert root_logger.level == logging.WARNING
        new_handlers = [handler for handler in root_logger.handlers if handler not in handlers]
        assert any(getattr(handler, "stream", None) is sys.stdout for handler in new_handlers)
        assert not any(isinstance(handler, logging.handlers.RotatingFileHandler) for handler in new_handlers)
