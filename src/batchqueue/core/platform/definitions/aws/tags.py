# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Set

from batchqueue.core.entity import CoreData

from .common import exponential_retry

if TYPE_CHECKING:
    from batchqueue.core.provider.resource import ResourceData

module_logger = logging.getLogger(__name__)

AWS_TAG_KEY_PREFIX = "aws:"

# AWS Batch TagResource/UntagResource specific retryables
BATCH_TAGGING_RETRYABLE_ERRORS = {"ServerException"}


class DefaultTagsConfig(CoreData):
    """Provider level tags to be merged into the tags of each resource"""

    def __init__(self, tags: Optional[Mapping[str, str]] = None) -> None:
        self.tags: Dict[str, str] = dict(tags) if tags else dict()


class IgnoreTagsConfig(CoreData):
    """Tag keys (or key prefixes) managed outside of this provider, never read into or written from state"""

    def __init__(self, keys: Optional[Iterable[str]] = None, key_prefixes: Optional[Iterable[str]] = None) -> None:
        self.keys: Set[str] = set(keys) if keys else set()
        self.key_prefixes: Set[str] = set(key_prefixes) if key_prefixes else set()


class KeyValueTags(CoreData):
    """Immutable key/value tag set with the filtering and diff operations required to reconcile resource tags."""

    def __init__(self, tags: Optional[Mapping[str, Any]] = None) -> None:
        self._tags: Dict[str, str] = {str(k): ("" if v is None else str(v)) for k, v in (tags or dict()).items()}

    def __len__(self) -> int:
        return len(self._tags)

    def __contains__(self, key: str) -> bool:
        return key in self._tags

    def keys(self) -> List[str]:
        return sorted(self._tags.keys())

    def ignore_aws(self) -> "KeyValueTags":
        """Drop the keys reserved by AWS ('aws:' prefix), they cannot be managed by users."""
        return KeyValueTags({k: v for k, v in self._tags.items() if not k.startswith(AWS_TAG_KEY_PREFIX)})

    def ignore_config(self, config: Optional[IgnoreTagsConfig]) -> "KeyValueTags":
        if config is None:
            return self
        return KeyValueTags(
            {
                k: v
                for k, v in self._tags.items()
                if k not in config.keys and not any(k.startswith(prefix) for prefix in config.key_prefixes)
            }
        )

    def merge(self, other: "KeyValueTags") -> "KeyValueTags":
        """Values from 'other' take precedence."""
        merged = dict(self._tags)
        merged.update(other._tags)
        return KeyValueTags(merged)

    def remove_default_config(self, config: Optional[DefaultTagsConfig]) -> "KeyValueTags":
        """Drop the tags that are identical to provider default tags (same key and value)."""
        if config is None or not config.tags:
            return self
        return KeyValueTags({k: v for k, v in self._tags.items() if config.tags.get(k, None) != v})

    def removed(self, new: "KeyValueTags") -> "KeyValueTags":
        """Tags in this set but not in 'new' (by key)."""
        return KeyValueTags({k: v for k, v in self._tags.items() if k not in new._tags})

    def updated(self, new: "KeyValueTags") -> "KeyValueTags":
        """Tags in 'new' that are missing from this set or carry a different value."""
        return KeyValueTags({k: v for k, v in new._tags.items() if self._tags.get(k, None) != v})

    def to_dict(self) -> Dict[str, str]:
        return dict(self._tags)


def merge_default_tags(default_tags_config: Optional[DefaultTagsConfig], tags: Optional[Mapping[str, Any]]) -> KeyValueTags:
    default_tags = KeyValueTags(default_tags_config.tags if default_tags_config else None)
    return default_tags.merge(KeyValueTags(tags))


def set_tags_diff(
    d: "ResourceData", default_tags_config: Optional[DefaultTagsConfig], ignore_tags_config: Optional[IgnoreTagsConfig]
) -> None:
    """Plan "tags_all" as the provider default tags merged with the resource "tags"."""
    all_tags = merge_default_tags(default_tags_config, d.get("tags")).ignore_config(ignore_tags_config)
    d.set_new("tags_all", all_tags.to_dict())


def update_tags(batch_client, resource_arn: str, old_tags: Optional[Mapping[str, Any]], new_tags: Optional[Mapping[str, Any]]) -> None:
    """Diff the tag maps and apply the result to the resource.

    Removed keys are untagged first, then new or changed keys are (re)tagged. AWS reserved keys are never touched.
    """
    old = KeyValueTags(old_tags).ignore_aws()
    new = KeyValueTags(new_tags).ignore_aws()

    removed_tags = old.removed(new)
    if len(removed_tags) > 0:
        module_logger.debug(f"Removing tags {removed_tags.keys()!r} from {resource_arn!r}")
        exponential_retry(
            batch_client.untag_resource, BATCH_TAGGING_RETRYABLE_ERRORS, resourceArn=resource_arn, tagKeys=removed_tags.keys()
        )

    updated_tags = old.updated(new)
    if len(updated_tags) > 0:
        module_logger.debug(f"Updating tags {updated_tags.keys()!r} on {resource_arn!r}")
        exponential_retry(batch_client.tag_resource, BATCH_TAGGING_RETRYABLE_ERRORS, resourceArn=resource_arn, tags=updated_tags.to_dict())
