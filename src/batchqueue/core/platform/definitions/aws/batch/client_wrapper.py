import logging
from enum import Enum, unique
from typing import Any, Dict, List, Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from batchqueue.core.platform.definitions.aws.common import exponential_retry

logger = logging.getLogger(__name__)

# AWS Batch service specific retryables (on top of the common ones)
BATCH_CLIENT_RETRYABLE_EXCEPTION_LIST = {"ServerException"}


@unique
class JobQueueState(str, Enum):
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"


@unique
class JobQueueStatus(str, Enum):
    """Refer
    https://boto3.amazonaws.com/v1/documentation/api/latest/reference/services/batch/client/describe_job_queues.html
    """

    CREATING = "CREATING"
    UPDATING = "UPDATING"
    DELETING = "DELETING"
    DELETED = "DELETED"
    VALID = "VALID"
    INVALID = "INVALID"


# reported by the status refresher when the queue cannot be described, matches none of the statuses above
JOB_QUEUE_REFRESH_FAILED_STATUS = "failed"


class JobQueueNotUniqueError(Exception):
    pass


def check_job_queue_status(status: str) -> bool:
    if status not in JobQueueStatus.__members__:
        logger.critical(
            f"AWS Batch introduced a new status {status!r} for job queues! Waiters will treat it as a failure. "
            f"Please upgrade to a newer version."
        )
        return False
    return True


def create_job_queue(batch_client, **api_params) -> Dict[str, Any]:
    """wrapped for better testability"""
    return exponential_retry(batch_client.create_job_queue, BATCH_CLIENT_RETRYABLE_EXCEPTION_LIST, **api_params)


def update_job_queue(batch_client, **api_params) -> Dict[str, Any]:
    """wrapped for better testability"""
    return exponential_retry(batch_client.update_job_queue, BATCH_CLIENT_RETRYABLE_EXCEPTION_LIST, **api_params)


def delete_job_queue(batch_client, job_queue: str) -> Dict[str, Any]:
    return exponential_retry(batch_client.delete_job_queue, BATCH_CLIENT_RETRYABLE_EXCEPTION_LIST, jobQueue=job_queue)


def describe_job_queues(batch_client, **api_params) -> Dict[str, Any]:
    """wrapped for better testability"""
    return exponential_retry(batch_client.describe_job_queues, BATCH_CLIENT_RETRYABLE_EXCEPTION_LIST, **api_params)


def get_job_queue(batch_client, job_queue: str) -> Optional[Dict[str, Any]]:
    """Describe a single job queue by name or ARN.

    Returns None if the queue does not exist (anymore).
    Raises JobQueueNotUniqueError if the lookup is ambiguous.
    """
    response = describe_job_queues(batch_client, jobQueues=[job_queue])
    job_queues: List[Dict[str, Any]] = response.get("jobQueues", [])
    if not job_queues:
        logger.debug(f"Job Queue {job_queue!r} is already gone")
        return None
    if len(job_queues) > 1:
        raise JobQueueNotUniqueError(f"Multiple Job Queues with name {job_queue!r}")
    return job_queues[0]


def job_queue_status_refresher(batch_client, job_queue: str):
    """Build the refresh callback for polling the status of a job queue.

    Missing queue is reported as DELETED. Describe failures are reported with a status that no waiter would expect,
    returning the error as the value so that the waiter can chain it.
    """

    def _refresh() -> Tuple[Any, str]:
        try:
            job_queue_detail = get_job_queue(batch_client, job_queue)
        except (ClientError, BotoCoreError, JobQueueNotUniqueError) as error:
            logger.error(f"Could not retrieve the status of AWS Batch job queue {job_queue!r}. Error: {error!r}")
            return error, JOB_QUEUE_REFRESH_FAILED_STATUS
        if job_queue_detail is None:
            return None, JobQueueStatus.DELETED.value
        status = job_queue_detail["status"]
        check_job_queue_status(status)
        return job_queue_detail, status

    return _refresh
