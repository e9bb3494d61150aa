# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from mock import MagicMock

import batchqueue.core.platform.configuration as configuration
from batchqueue.core.platform.configuration import ProviderConfiguration
from batchqueue.core.platform.definitions.aws.common import AWSAccessPair, CommonParams
from batchqueue.core.platform.definitions.aws.tags import DefaultTagsConfig, IgnoreTagsConfig


class TestProviderConfiguration:
    def test_builder(self):
        conf = (
            ProviderConfiguration.builder()
            .with_region("eu-west-1")
            .with_access_pair("key", "secret")
            .with_default_tags({"env": "prod"})
            .with_ignore_tags(["owner"])
            .with_ignore_tag_prefixes(["cost:"])
            .with_param("custom", 1)
            .build()
        )

        assert conf.region == "eu-west-1"
        assert conf.get_param(CommonParams.ACCESS_PAIR) == AWSAccessPair("key", "secret")
        assert conf.get_param("custom") == 1
        assert conf.get_param("missing", "default") == "default"
        assert conf.default_tags_config == DefaultTagsConfig({"env": "prod"})
        assert conf.ignore_tags_config == IgnoreTagsConfig(keys=["owner"], key_prefixes=["cost:"])

    def test_empty_tag_configs(self):
        conf = ProviderConfiguration.builder().build()

        assert conf.default_tags_config.tags == {}
        assert conf.ignore_tags_config.keys == set()
        assert conf.ignore_tags_config.key_prefixes == set()

    def test_region_falls_back_to_env(self, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-south-1")

        assert ProviderConfiguration.builder().build().region == "ap-south-1"

        monkeypatch.setenv("AWS_REGION", "us-west-2")
        assert ProviderConfiguration.builder().build().region == "us-west-2"
        assert ProviderConfiguration.builder().with_region("us-east-2").build().region == "us-east-2"

    def test_session_from_profile(self, monkeypatch):
        get_session = MagicMock()
        monkeypatch.setattr(configuration, "get_session", get_session)
        conf = ProviderConfiguration.builder().with_profile("batch-admin").with_region("us-west-2").build()

        assert conf.session is get_session.return_value
        get_session.assert_called_once_with("batch-admin", "us-west-2")
        # created once
        assert conf.session is get_session.return_value
        assert get_session.call_count == 1

    def test_session_from_access_pair(self, monkeypatch):
        get_session = MagicMock()
        monkeypatch.setattr(configuration, "get_session", get_session)
        conf = ProviderConfiguration.builder().with_access_pair("key", "secret").with_region("us-west-2").build()

        _ = conf.session

        get_session.assert_called_once_with(AWSAccessPair("key", "secret"), "us-west-2")

    def test_clients_are_cached(self):
        session = MagicMock()
        conf = ProviderConfiguration.builder().with_session(session).with_region("us-east-1").build()

        assert conf.session is session
        assert conf.batch is conf.client("batch")
        session.client.assert_called_once_with("batch", region_name="us-east-1")

    def test_serializable_copy_drops_session(self):
        session = MagicMock()
        conf = ProviderConfiguration.builder().with_session(session).with_region("us-east-1").with_default_tags({"a": "b"}).build()
        _ = conf.batch

        copy = conf.serializable_copy()

        assert copy.get_param(CommonParams.BOTO_SESSION) is None
        assert copy.get_param(CommonParams.REGION) == "us-east-1"
        assert copy.default_tags_config.tags == {"a": "b"}
        # source configuration keeps its session
        assert conf.session is session
        assert conf.get_param(CommonParams.BOTO_SESSION) is session

        restored = ProviderConfiguration.deserialize(conf.serialize(check_unsafe=True))
        assert restored.region == "us-east-1"
        assert restored.default_tags_config.tags == {"a": "b"}
