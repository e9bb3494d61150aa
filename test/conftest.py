# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging

import pytest


@pytest.fixture(autouse=True)
def quiet_boto_logging():
    # botocore debug output floods the captured logs of waiter tests
    for name in ("boto3", "botocore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)
    yield
