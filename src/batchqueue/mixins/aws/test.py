# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import json
import os
from typing import Dict, List, Optional

import boto3
import pytest
from moto import mock_aws

from batchqueue.core.platform.configuration import ProviderConfiguration
from batchqueue.core.platform.drivers.aws_batch_job_queue import AWSBatchJobQueue


class AWSTestBase:
    testing_keyname = "testing"
    region = "us-east-1"
    # default moto acc id
    account_id = "123456789012"

    @pytest.fixture(scope="class")
    def aws_credentials(self):
        os.environ["AWS_ACCESS_KEY_ID"] = self.testing_keyname
        os.environ["AWS_SECRET_ACCESS_KEY"] = self.testing_keyname
        os.environ["AWS_SECURITY_TOKEN"] = self.testing_keyname
        os.environ["AWS_SESSION_TOKEN"] = self.testing_keyname
        os.environ["AWS_DEFAULT_REGION"] = self.region

    @pytest.fixture()
    def aws_mock(self, aws_credentials):
        # job queues never need the docker backed job execution in moto
        with mock_aws(config={"batch": {"use_docker": False}}):
            yield

    @pytest.fixture()
    def batch_client(self, aws_mock):
        return boto3.client(service_name="batch", region_name=self.region)

    @pytest.fixture()
    def iam_client(self, aws_mock):
        return boto3.client(service_name="iam", region_name=self.region)

    @pytest.fixture()
    def provider(self, aws_mock) -> ProviderConfiguration:
        return ProviderConfiguration.builder().with_session(boto3.Session(region_name=self.region)).with_region(self.region).build()

    def create_job_queue_resource(self, provider: ProviderConfiguration, timeout: float = 5) -> AWSBatchJobQueue:
        """Resource with waiter timings reduced for the emulated backend"""
        return AWSBatchJobQueue(provider, timeout=timeout, delay=0, min_timeout=0)

    def create_service_role(self, iam_client, role_name: str = "BatchServiceRole") -> str:
        trust_policy = {
            "Version": "2012-10-17",
            "Statement": [{"Effect": "Allow", "Principal": {"Service": "batch.amazonaws.com"}, "Action": "sts:AssumeRole"}],
        }
        response = iam_client.create_role(RoleName=role_name, AssumeRolePolicyDocument=json.dumps(trust_policy))
        return response["Role"]["Arn"]

    def create_compute_environments(self, batch_client, iam_client, names: List[str], tags: Optional[Dict[str, str]] = None) -> List[str]:
        """Create UNMANAGED compute environments and return their ARNs (in the same order as names)"""
        service_role_arn = self.create_service_role(iam_client)
        arns = []
        for name in names:
            api_params = {"computeEnvironmentName": name, "type": "UNMANAGED", "state": "ENABLED", "serviceRole": service_role_arn}
            if tags:
                api_params["tags"] = tags
            arns.append(batch_client.create_compute_environment(**api_params)["computeEnvironmentArn"])
        return arns
