# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest

from batchqueue.core.platform.drivers.aws_batch_job_queue import AWSBatchJobQueue
from batchqueue.core.provider.schema import Attribute, AttributeType, validate_config
from batchqueue.core.provider.validation import int_at_least, string_in_slice, validate_batch_name


def _job_queue_config(**overrides):
    config = {
        "name": "q1",
        "priority": 1,
        "state": "ENABLED",
        "compute_environment_order": [{"compute_environment": "a", "order": 1}, {"compute_environment": "b", "order": 0}],
    }
    config.update(overrides)
    return config


class TestValidation:
    @pytest.mark.parametrize("name", ["q1", "Q", "0queue", "my_queue-1", "a" * 128])
    def test_validate_batch_name_valid(self, name):
        assert validate_batch_name(name, "name") == []

    @pytest.mark.parametrize("name", ["", "-queue", "_queue", "queue.name", "queue name", "a" * 129, None])
    def test_validate_batch_name_invalid(self, name):
        assert len(validate_batch_name(name, "name")) == 1

    def test_int_at_least(self):
        validate = int_at_least(0)
        assert validate(0, "order") == []
        assert validate(5, "order") == []
        assert validate(-1, "order")
        assert validate("1", "order")
        assert validate(True, "order")

    def test_string_in_slice(self):
        assert string_in_slice(["ENABLED", "DISABLED"], ignore_case=True)("enabled", "state") == []
        assert string_in_slice(["ENABLED", "DISABLED"])("enabled", "state")
        assert string_in_slice(["ENABLED", "DISABLED"])("PAUSED", "state")
        assert string_in_slice(["ENABLED", "DISABLED"])(1, "state")


class TestSchema:
    def test_required_attribute_cannot_be_computed(self):
        with pytest.raises(ValueError):
            Attribute(AttributeType.STRING, required=True, computed=True)

    def test_valid_job_queue_config(self):
        assert validate_config(AWSBatchJobQueue.SCHEMA, _job_queue_config()) == []
        assert validate_config(AWSBatchJobQueue.SCHEMA, _job_queue_config(state="disabled", tags={"k": "v"})) == []

    def test_missing_required(self):
        config = _job_queue_config()
        del config["priority"]
        errors = validate_config(AWSBatchJobQueue.SCHEMA, config)
        assert len(errors) == 1
        assert "'priority'" in errors[0]

    def test_unexpected_argument(self):
        errors = validate_config(AWSBatchJobQueue.SCHEMA, _job_queue_config(scheduling_policy="foo"))
        assert errors == ["An argument named 'scheduling_policy' is not expected here"]

    def test_computed_attributes_cannot_be_set(self):
        errors = validate_config(AWSBatchJobQueue.SCHEMA, _job_queue_config(arn="arn:aws:batch:us-east-1:123456789012:job-queue/q1"))
        assert len(errors) == 1
        assert "computed" in errors[0]

    def test_type_mismatch(self):
        errors = validate_config(AWSBatchJobQueue.SCHEMA, _job_queue_config(priority="1", tags={"k": 1}))
        assert len(errors) == 2

    def test_compute_environment_order_limits(self):
        too_many = [{"compute_environment": str(i), "order": i} for i in range(4)]
        errors = validate_config(AWSBatchJobQueue.SCHEMA, _job_queue_config(compute_environment_order=too_many))
        assert len(errors) == 1
        assert "3 item(s) maximum" in errors[0]

        errors = validate_config(AWSBatchJobQueue.SCHEMA, _job_queue_config(compute_environment_order=[]))
        assert len(errors) == 1

    def test_compute_environment_order_nested_errors(self):
        errors = validate_config(
            AWSBatchJobQueue.SCHEMA,
            _job_queue_config(compute_environment_order=[{"compute_environment": "a", "order": -1}, {"order": 0}]),
        )
        assert len(errors) == 2
        assert any("compute_environment_order.0.order" in error for error in errors)
        assert any("compute_environment_order.1.compute_environment" in error for error in errors)

    def test_invalid_name_and_state(self):
        errors = validate_config(AWSBatchJobQueue.SCHEMA, _job_queue_config(name="-bad", state="PAUSED"))
        assert len(errors) == 2
