# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import os
from typing import Any, Dict, Iterable, Mapping, Optional, Type

import boto3

from batchqueue.core.entity import CoreData

from .definitions.aws.common import AWSAccessPair, CommonParams, get_session
from .definitions.aws.tags import DefaultTagsConfig, IgnoreTagsConfig

module_logger = logging.getLogger(__name__)

REGION_ENV_VARS = ("AWS_REGION", "AWS_DEFAULT_REGION")


class ProviderConfiguration(CoreData):
    """Provider level settings shared by the resources (the 'meta' passed into each resource).

    Owns the boto3 session and the clients created from it. Those are not serializable, so they are dropped from
    serializable copies and lazily re-created.

    Example:

        conf = ProviderConfiguration.builder().with_region("us-east-1").with_default_tags({"team": "ml"}).build()
    """

    class _Builder:
        def __init__(self, conf_class: Type["ProviderConfiguration"]) -> None:
            self._new_conf: ProviderConfiguration = conf_class()

        def with_region(self, region: str) -> "ProviderConfiguration._Builder":
            self._new_conf.add_param(CommonParams.REGION, region)
            return self

        def with_access_pair(self, aws_access_key_id: str, aws_secret_access_key: str) -> "ProviderConfiguration._Builder":
            self._new_conf.add_param(CommonParams.ACCESS_PAIR, AWSAccessPair(aws_access_key_id, aws_secret_access_key))
            return self

        def with_profile(self, profile_name: str) -> "ProviderConfiguration._Builder":
            self._new_conf.add_param(CommonParams.PROFILE, profile_name)
            return self

        def with_session(self, session: boto3.Session) -> "ProviderConfiguration._Builder":
            self._new_conf.add_param(CommonParams.BOTO_SESSION, session)
            return self

        def with_default_tags(self, tags: Mapping[str, str]) -> "ProviderConfiguration._Builder":
            self._new_conf.add_param(CommonParams.DEFAULT_TAGS, dict(tags))
            return self

        def with_ignore_tags(self, keys: Iterable[str]) -> "ProviderConfiguration._Builder":
            self._new_conf.add_param(CommonParams.IGNORE_TAG_KEYS, set(keys))
            return self

        def with_ignore_tag_prefixes(self, key_prefixes: Iterable[str]) -> "ProviderConfiguration._Builder":
            self._new_conf.add_param(CommonParams.IGNORE_TAG_KEY_PREFIXES, set(key_prefixes))
            return self

        def with_param(self, key: str, value: Any) -> "ProviderConfiguration._Builder":
            self._new_conf.add_param(key, value)
            return self

        def build(self) -> "ProviderConfiguration":
            return self._new_conf

    @classmethod
    def builder(cls) -> "ProviderConfiguration._Builder":
        return ProviderConfiguration._Builder(cls)

    def __init__(self) -> None:
        self._params: Dict[str, Any] = dict()
        self._session: Optional[boto3.Session] = None
        self._clients: Dict[str, Any] = dict()

    def add_param(self, key: str, value: Any) -> None:
        self._params[key] = value

    def get_param(self, key: str, default: Any = None) -> Any:
        return self._params.get(key, default)

    @property
    def region(self) -> Optional[str]:
        region = self._params.get(CommonParams.REGION, None)
        if not region:
            for env_var in REGION_ENV_VARS:
                if os.environ.get(env_var, None):
                    return os.environ[env_var]
        return region

    @property
    def session(self) -> boto3.Session:
        if self._session is None:
            session = self._params.get(CommonParams.BOTO_SESSION, None)
            if session is None:
                credentials = self._params.get(CommonParams.ACCESS_PAIR, None) or self._params.get(CommonParams.PROFILE, None)
                session = get_session(credentials, self.region)
            self._session = session
        return self._session

    def client(self, service_name: str) -> Any:
        if service_name not in self._clients:
            module_logger.debug(f"Creating {service_name!r} client in region {self.region!r}")
            self._clients[service_name] = self.session.client(service_name, region_name=self.region)
        return self._clients[service_name]

    @property
    def batch(self) -> Any:
        return self.client("batch")

    @property
    def default_tags_config(self) -> DefaultTagsConfig:
        return DefaultTagsConfig(self._params.get(CommonParams.DEFAULT_TAGS, None))

    @property
    def ignore_tags_config(self) -> IgnoreTagsConfig:
        return IgnoreTagsConfig(
            self._params.get(CommonParams.IGNORE_TAG_KEYS, None), self._params.get(CommonParams.IGNORE_TAG_KEY_PREFIXES, None)
        )

    def _serializable_copy_init(self, org_instance: "ProviderConfiguration") -> None:
        self._params = {k: v for k, v in org_instance._params.items() if k != CommonParams.BOTO_SESSION}
        self._session = None
        self._clients = dict()
