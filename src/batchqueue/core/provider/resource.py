# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from batchqueue.core.entity import CoreData

from .schema import Attribute, AttributeType, ResourceConfigError, Schema, validate_config

module_logger = logging.getLogger(__name__)

ID_KEY = "id"

ResourceState = Dict[str, Any]


def _zero_value(attr: Attribute) -> Any:
    if attr.type == AttributeType.MAP:
        return dict()
    if attr.type == AttributeType.LIST:
        return list()
    return None


class ResourceData(CoreData):
    """State of a single resource instance during a lifecycle operation.

    Wraps the prior (persisted) state and the planned new values (user config + computed diffs). Values written by
    the operation via `set` take precedence over planned values which take precedence over the prior state.
    """

    def __init__(self, schema: Schema, state: Optional[Mapping[str, Any]] = None, planned: Optional[Mapping[str, Any]] = None) -> None:
        self._schema = schema
        state = copy.deepcopy(dict(state)) if state else dict()
        self._id: str = state.pop(ID_KEY, None) or ""
        self._state: Dict[str, Any] = state
        self._planned: Dict[str, Any] = copy.deepcopy(dict(planned)) if planned is not None else dict()
        self._written: Dict[str, Any] = dict()

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: Optional[str]) -> None:
        """Empty id marks the resource as gone."""
        self._id = resource_id or ""

    def _check_key(self, key: str) -> None:
        if key not in self._schema:
            raise KeyError(f"{key!r} is not defined in resource schema {sorted(self._schema.keys())!r}")

    def get(self, key: str) -> Any:
        self._check_key(key)
        for values in (self._written, self._planned, self._state):
            if key in values:
                return copy.deepcopy(values[key])
        return None

    def get_change(self, key: str) -> Tuple[Any, Any]:
        self._check_key(key)
        old = self._state.get(key, None)
        new = self._planned[key] if key in self._planned else old
        return copy.deepcopy(old), copy.deepcopy(new)

    def has_change(self, key: str) -> bool:
        old, new = self.get_change(key)
        return old != new

    def has_changes(self, *keys: str) -> bool:
        return any(self.has_change(key) for key in keys)

    def set(self, key: str, value: Any) -> None:
        self._check_key(key)
        self._written[key] = copy.deepcopy(value)

    def set_new(self, key: str, value: Any) -> None:
        """Overwrite the planned value of an attribute (used while customizing the diff)."""
        self._check_key(key)
        self._planned[key] = copy.deepcopy(value)

    def state(self) -> Optional[ResourceState]:
        if not self._id:
            return None
        merged: ResourceState = {ID_KEY: self._id}
        for key in self._schema.keys():
            merged[key] = self.get(key)
        return merged


class Resource(ABC):
    """Base class for the lifecycle of a remote resource type.

    Sub-classes declare `SCHEMA` and implement create/read/update/delete. `apply`, `refresh` and `import_` are the
    entry points for the caller which persists the states returned from them.
    """

    SCHEMA: ClassVar[Schema]

    def __init__(self, provider: Any) -> None:
        self._provider = provider

    @property
    def provider(self) -> Any:
        return self._provider

    @abstractmethod
    def create(self, d: ResourceData) -> None:
        ...

    @abstractmethod
    def read(self, d: ResourceData) -> None:
        ...

    @abstractmethod
    def update(self, d: ResourceData) -> None:
        ...

    @abstractmethod
    def delete(self, d: ResourceData) -> None:
        ...

    def import_state(self, d: ResourceData) -> List[ResourceData]:
        """Seed the data with whatever the read operation needs, default is passthrough (id only)."""
        return [d]

    def customize_diff(self, d: ResourceData) -> None:
        pass

    def plan(self, prior_state: Optional[Mapping[str, Any]], config: Mapping[str, Any]) -> ResourceData:
        errors = validate_config(self.SCHEMA, config)
        if errors:
            raise ResourceConfigError(errors)

        planned: Dict[str, Any] = dict()
        for key, attr in self.SCHEMA.items():
            if attr.computed_only:
                continue
            if config.get(key, None) is not None:
                planned[key] = config[key]
            elif not attr.computed:
                planned[key] = _zero_value(attr)
        d = ResourceData(self.SCHEMA, prior_state, planned)
        self.customize_diff(d)
        return d

    def requires_replacement(self, d: ResourceData) -> bool:
        return any(attr.force_new and d.has_change(key) for key, attr in self.SCHEMA.items())

    def apply(self, prior_state: Optional[Mapping[str, Any]], config: Optional[Mapping[str, Any]]) -> Optional[ResourceState]:
        """Converge the remote resource to 'config' and return the new state (None if the resource is gone)."""
        if config is None:
            if prior_state:
                self.delete(ResourceData(self.SCHEMA, prior_state))
            return None

        if not prior_state or not prior_state.get(ID_KEY, None):
            d = self.plan(None, config)
            self.create(d)
            return d.state()

        d = self.plan(prior_state, config)
        if self.requires_replacement(d):
            module_logger.info(f"Replacing {self.__class__.__name__} resource {d.id!r} due to changes in immutable attributes")
            self.delete(ResourceData(self.SCHEMA, prior_state))
            d = self.plan(None, config)
            self.create(d)
        else:
            self.update(d)
        return d.state()

    def refresh(self, state: Mapping[str, Any]) -> Optional[ResourceState]:
        d = ResourceData(self.SCHEMA, state)
        self.read(d)
        return d.state()

    def import_(self, resource_id: str) -> List[ResourceState]:
        d = ResourceData(self.SCHEMA, {ID_KEY: resource_id})
        imported_states = []
        for imported in self.import_state(d):
            self.read(imported)
            state = imported.state()
            if state is None:
                raise ValueError(f"Cannot import non-existent remote object {resource_id!r}")
            imported_states.append(state)
        return imported_states
