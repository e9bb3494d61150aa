# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import time
from enum import Enum, unique
from typing import Union, overload

import boto3
from botocore.exceptions import ClientError, WaiterError

from batchqueue.core.entity import CoreData

module_logger = logging.getLogger(__name__)


@unique
class CommonParams(str, Enum):
    BOTO_SESSION = "AWS_BOTO_SESSION"
    REGION = "AWS_REGION"
    ACCESS_PAIR = "AWS_ACCESS_PAIR"
    PROFILE = "AWS_PROFILE"
    DEFAULT_TAGS = "AWS_DEFAULT_TAGS"
    IGNORE_TAG_KEYS = "AWS_IGNORE_TAG_KEYS"
    IGNORE_TAG_KEY_PREFIXES = "AWS_IGNORE_TAG_KEY_PREFIXES"


class AWSAccessPair(CoreData):
    def __init__(self, aws_access_key_id: str, aws_secret_access_key: str) -> None:
        self.aws_access_key_id = aws_access_key_id
        self.aws_secret_access_key = aws_secret_access_key


def get_code_for_exception(error):
    if isinstance(error, ClientError) and "Code" in error.response["Error"]:
        return error.response["Error"]["Code"]
    elif isinstance(error, WaiterError) and "Error" in error.last_response:
        return error.last_response["Error"]["Code"]
    elif hasattr(error, "error_code"):
        return error.error_code

    return error.__class__.__name__


# common AWS service errors
AWS_COMMON_RETRYABLE_ERRORS = [
    "TooManyRequestsException",
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "Unavailable",
    "InternalFailure",
    "InternalError",
    "InternalServerError",
    "ServiceUnavailable",
    "ServiceUnavailableException",
    # botocore common retryable errors
    "ConnectTimeoutError",
    "ReadTimeoutError",
]


MAX_SLEEP_INTERVAL_PARAM = "_max_sleep_time_in_secs"
MAX_SLEEP_INTERVAL_DEFAULT = 64 + 1


def exponential_retry(func, service_retryable_errors, *func_args, **func_kwargs):
    """
    Retries the specified function with a simple exponential backoff algorithm.
    :param func: The function to retry.
    :param service_retryable_errors: AWS service specific retryable error codes. These are added to an internal list
                                    of AWS common retryable errors to get a final list of retryable errors. Anything else
                                    is raised without a retry.
    :param func_args: The positional arguments to pass to the function.
    :param func_kwargs: The keyword arguments to pass to the function.
    :return: The return value of the retried function.
    """
    retryables = list(AWS_COMMON_RETRYABLE_ERRORS)
    retryables.extend(service_retryable_errors)
    sleepy_time = 1
    if MAX_SLEEP_INTERVAL_PARAM in func_kwargs:
        max_sleepy_time = func_kwargs.pop(MAX_SLEEP_INTERVAL_PARAM)
    else:
        max_sleepy_time = MAX_SLEEP_INTERVAL_DEFAULT
    while True:
        try:
            func_return = func(*func_args, **func_kwargs)
            module_logger.debug("Ran %s, got %s.", getattr(func, "__name__", str(func)), func_return)
            return func_return
        except Exception as error:
            error_code = get_code_for_exception(error)
            if error_code in retryables:
                module_logger.critical(f"Sleeping for {sleepy_time} secs before retrying. Retryable error_code={error_code!r}")
                time.sleep(sleepy_time)
                sleepy_time = sleepy_time * 2
                if sleepy_time < max_sleepy_time:
                    continue
            raise


@overload
def get_session(aws_access_pair: AWSAccessPair = None, region: str = None) -> boto3.Session: ...


@overload
def get_session(profile_name: str = None, region: str = None) -> boto3.Session: ...


def get_session(access_pair_or_profile: Union[AWSAccessPair, str] = None, region: str = None) -> boto3.Session:
    """
    Wrapper around boto3.Session()

    Parameters
    access_pair_or_profile : Union[AWSAccessPair, str], a :class:`AWSAccessPair` (key_id and access_key) or the name
        of a profile from the local AWS config
    region: string, AWS region

    Returns
    boto3.Session
    """
    if not access_pair_or_profile:
        # Use system defaults (~/.aws, env, instance metadata, etc).
        module_logger.info("Creating boto3.Session with system defaults.")
        return boto3.Session(region_name=region)

    if isinstance(access_pair_or_profile, AWSAccessPair):
        module_logger.info("Creating boto3.Session with access key pair.")
        return boto3.Session(
            aws_access_key_id=access_pair_or_profile.aws_access_key_id,
            aws_secret_access_key=access_pair_or_profile.aws_secret_access_key,
            region_name=region,
        )

    module_logger.info(f"Creating boto3.Session with profile {access_pair_or_profile!r}.")
    return boto3.Session(profile_name=access_pair_or_profile, region_name=region)
