# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from ._logging_config import init_basic_logging
from .core.platform.configuration import ProviderConfiguration
from .core.platform.definitions.aws.batch.client_wrapper import JobQueueNotUniqueError, JobQueueState, JobQueueStatus
from .core.platform.definitions.aws.common import AWSAccessPair
from .core.platform.definitions.aws.tags import DefaultTagsConfig, IgnoreTagsConfig, KeyValueTags
from .core.platform.drivers.aws_batch_job_queue import (
    AWSBatchJobQueue,
    ComputeEnvironmentOrder,
    JobQueueObserved,
    JobQueueOperationError,
    JobQueueSpec,
)
from .core.provider.resource import Resource, ResourceData
from .core.provider.schema import ResourceConfigError
from .core.provider.state_change import UnexpectedStateError, WaitForStateError, WaitTimeoutError
