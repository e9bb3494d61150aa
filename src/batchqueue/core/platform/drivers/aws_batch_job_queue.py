# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError
from overrides import overrides

from batchqueue.core.entity import CoreData
from batchqueue.core.provider.resource import Resource, ResourceData
from batchqueue.core.provider.schema import Attribute, AttributeType, Schema
from batchqueue.core.provider.state_change import WaitForStateError, wait_for_state
from batchqueue.core.provider.validation import int_at_least, string_in_slice, validate_batch_name

from ..configuration import ProviderConfiguration
from ..definitions.aws.batch.client_wrapper import (
    JobQueueState,
    JobQueueStatus,
    check_job_queue_status,
    create_job_queue,
    delete_job_queue,
    get_job_queue,
    job_queue_status_refresher,
    update_job_queue,
)
from ..definitions.aws.tags import KeyValueTags, merge_default_tags, set_tags_diff, update_tags

module_logger = logging.getLogger(__name__)


class JobQueueOperationError(Exception):
    pass


class ComputeEnvironmentOrder(CoreData):
    def __init__(self, compute_environment: str, order: int) -> None:
        self.compute_environment = compute_environment
        self.order = order

    @classmethod
    def from_config(cls, raw: Mapping[str, Any]) -> "ComputeEnvironmentOrder":
        return cls(str(raw["compute_environment"]), int(raw["order"]))

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "ComputeEnvironmentOrder":
        return cls(raw["computeEnvironment"], int(raw["order"]))

    def to_config(self) -> Dict[str, Any]:
        return {"compute_environment": self.compute_environment, "order": self.order}

    def to_api(self) -> Dict[str, Any]:
        return {"computeEnvironment": self.compute_environment, "order": self.order}


def sort_compute_environment_order(items: Sequence[ComputeEnvironmentOrder]) -> List[ComputeEnvironmentOrder]:
    # stable, so entries with the same order keep their relative position
    return sorted(items, key=lambda item: item.order)


class JobQueueSpec(CoreData):
    """Desired state of a job queue as declared by the user"""

    def __init__(
        self,
        name: str,
        priority: int,
        state: JobQueueState,
        compute_environment_order: Sequence[ComputeEnvironmentOrder],
        tags: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.name = name
        self.priority = priority
        self.state = state
        self.compute_environment_order = list(compute_environment_order)
        self.tags = dict(tags) if tags else dict()

    @classmethod
    def from_resource_data(cls, d: ResourceData) -> "JobQueueSpec":
        return cls(
            d.get("name"),
            d.get("priority"),
            JobQueueState(d.get("state").upper()),
            [ComputeEnvironmentOrder.from_config(item) for item in d.get("compute_environment_order")],
            d.get("tags"),
        )


class JobQueueObserved(CoreData):
    """Actual state of a job queue as reported by AWS Batch"""

    def __init__(
        self,
        arn: str,
        name: str,
        status: str,
        priority: int,
        state: str,
        compute_environment_order: Sequence[ComputeEnvironmentOrder],
        tags: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.arn = arn
        self.name = name
        check_job_queue_status(status)
        self.status = status
        self.priority = priority
        self.state = state
        self.compute_environment_order = sort_compute_environment_order(compute_environment_order)
        self.tags = dict(tags) if tags else dict()

    @classmethod
    def from_api(cls, job_queue: Mapping[str, Any]) -> "JobQueueObserved":
        return cls(
            job_queue["jobQueueArn"],
            job_queue["jobQueueName"],
            job_queue["status"],
            job_queue["priority"],
            job_queue["state"],
            [ComputeEnvironmentOrder.from_api(item) for item in job_queue.get("computeEnvironmentOrder", [])],
            job_queue.get("tags", None),
        )


class AWSBatchJobQueue(Resource):
    """AWS Batch Job Queue resource.

    Refer
        https://boto3.amazonaws.com/v1/documentation/api/latest/reference/services/batch/client/create_job_queue.html

    Queue status is asynchronously driven by AWS Batch, so every mutation is followed by a wait on the status of the
    queue to become 'VALID' (or 'DELETED'). Deletion is a two phase sequence since a queue can only be deleted after
    it gets disabled.
    """

    SCHEMA: Schema = {
        "name": Attribute(AttributeType.STRING, required=True, force_new=True, validate_funcs=[validate_batch_name]),
        "priority": Attribute(AttributeType.INT, required=True),
        "state": Attribute(
            AttributeType.STRING,
            required=True,
            validate_funcs=[string_in_slice([JobQueueState.ENABLED.value, JobQueueState.DISABLED.value], ignore_case=True)],
        ),
        "compute_environment_order": Attribute(
            AttributeType.LIST,
            required=True,
            min_items=1,
            max_items=3,
            elem={
                "compute_environment": Attribute(AttributeType.STRING, required=True),
                "order": Attribute(AttributeType.INT, required=True, validate_funcs=[int_at_least(0)]),
            },
        ),
        "tags": Attribute(AttributeType.MAP, optional=True),
        "tags_all": Attribute(AttributeType.MAP, optional=True, computed=True),
        "arn": Attribute(AttributeType.STRING, computed=True),
    }

    STATUS_WAIT_TIMEOUT_IN_SECS = 10 * 60
    STATUS_WAIT_DELAY_IN_SECS = 10
    STATUS_WAIT_MIN_INTERVAL_IN_SECS = 3

    def __init__(
        self,
        provider: ProviderConfiguration,
        timeout: float = STATUS_WAIT_TIMEOUT_IN_SECS,
        delay: float = STATUS_WAIT_DELAY_IN_SECS,
        min_timeout: float = STATUS_WAIT_MIN_INTERVAL_IN_SECS,
    ) -> None:
        super().__init__(provider)
        self._timeout = timeout
        self._delay = delay
        self._min_timeout = min_timeout

    @property
    def _batch(self):
        return self.provider.batch

    @overrides
    def customize_diff(self, d: ResourceData) -> None:
        set_tags_diff(d, self.provider.default_tags_config, self.provider.ignore_tags_config)
        state = d.get("state")
        if state:
            d.set_new("state", state.upper())
        compute_env_order = d.get("compute_environment_order")
        if compute_env_order:
            # declared order of entries is irrelevant, AWS Batch only respects the 'order' field
            ordered = sort_compute_environment_order([ComputeEnvironmentOrder.from_config(item) for item in compute_env_order])
            d.set_new("compute_environment_order", [item.to_config() for item in ordered])

    def _wait(self, job_queue: str, pending: Sequence[str], target: Sequence[str]) -> Any:
        return wait_for_state(
            job_queue_status_refresher(self._batch, job_queue),
            pending,
            target,
            timeout=self._timeout,
            delay=self._delay,
            min_timeout=self._min_timeout,
        )

    @overrides
    def create(self, d: ResourceData) -> None:
        spec = JobQueueSpec.from_resource_data(d)
        tags = merge_default_tags(self.provider.default_tags_config, spec.tags).ignore_aws()

        api_params = {
            "computeEnvironmentOrder": [item.to_api() for item in spec.compute_environment_order],
            "jobQueueName": spec.name,
            "priority": spec.priority,
            "state": spec.state.value,
        }
        if len(tags) > 0:
            api_params["tags"] = tags.to_dict()

        try:
            response = create_job_queue(self._batch, **api_params)
        except (ClientError, BotoCoreError) as error:
            raise JobQueueOperationError(f"{error} {spec.name!r}") from error

        try:
            self._wait(spec.name, [JobQueueStatus.CREATING.value, JobQueueStatus.UPDATING.value], [JobQueueStatus.VALID.value])
        except WaitForStateError as error:
            raise JobQueueOperationError(f"Error waiting for JobQueue {spec.name!r} state to be 'VALID': {error}") from error

        arn = response["jobQueueArn"]
        module_logger.debug(f"JobQueue created: {arn}")
        d.set_id(arn)

        self.read(d)

    @overrides
    def read(self, d: ResourceData) -> None:
        job_queue = get_job_queue(self._batch, d.id)
        if job_queue is None:
            module_logger.warning(f"Batch Job Queue ({d.id}) not found, removing from state")
            d.set_id("")
            return

        observed = JobQueueObserved.from_api(job_queue)
        d.set("arn", observed.arn)
        d.set("name", observed.name)
        d.set("priority", observed.priority)
        d.set("state", observed.state)
        d.set("compute_environment_order", [item.to_config() for item in observed.compute_environment_order])

        tags = KeyValueTags(observed.tags).ignore_aws().ignore_config(self.provider.ignore_tags_config)
        d.set("tags", tags.remove_default_config(self.provider.default_tags_config).to_dict())
        d.set("tags_all", tags.to_dict())

    @overrides
    def update(self, d: ResourceData) -> None:
        if d.has_changes("compute_environment_order", "priority", "state"):
            spec = JobQueueSpec.from_resource_data(d)
            try:
                update_job_queue(
                    self._batch,
                    jobQueue=spec.name,
                    computeEnvironmentOrder=[item.to_api() for item in spec.compute_environment_order],
                    priority=spec.priority,
                    state=spec.state.value,
                )
            except (ClientError, BotoCoreError) as error:
                raise JobQueueOperationError(f"error updating Batch Job Queue ({spec.name}): {error}") from error

            try:
                self._wait(spec.name, [JobQueueStatus.UPDATING.value], [JobQueueStatus.VALID.value])
            except WaitForStateError as error:
                raise JobQueueOperationError(f"Error waiting for JobQueue {spec.name!r} state to be 'VALID': {error}") from error

        if d.has_change("tags_all"):
            old_tags, new_tags = d.get_change("tags_all")
            try:
                update_tags(self._batch, d.get("arn"), old_tags, new_tags)
            except (ClientError, BotoCoreError) as error:
                raise JobQueueOperationError(f"error updating tags: {error}") from error

        self.read(d)

    @overrides
    def delete(self, d: ResourceData) -> None:
        name = d.get("name")

        module_logger.debug(f"Disabling Batch Job Queue {name}")
        try:
            self._disable(name)
        except (ClientError, BotoCoreError, WaitForStateError) as error:
            raise JobQueueOperationError(f"error disabling Batch Job Queue ({name}): {error}") from error

        module_logger.debug(f"Deleting Batch Job Queue {name}")
        try:
            self._delete(name)
        except (ClientError, BotoCoreError, WaitForStateError) as error:
            raise JobQueueOperationError(f"error deleting Batch Job Queue ({name}): {error}") from error

        d.set_id("")

    def _disable(self, name: str) -> None:
        update_job_queue(self._batch, jobQueue=name, state=JobQueueState.DISABLED.value)
        # or the delete will fail due to queue "resource is being modified"
        self._wait(name, [JobQueueStatus.UPDATING.value], [JobQueueStatus.VALID.value])

    def _delete(self, name: str) -> None:
        delete_job_queue(self._batch, name)
        self._wait(name, [JobQueueState.DISABLED.value, JobQueueStatus.DELETING.value], [JobQueueStatus.DELETED.value])

    @overrides
    def import_state(self, d: ResourceData) -> List[ResourceData]:
        d.set("arn", d.id)
        return [d]
