# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from enum import Enum, unique
from typing import Any, Dict, List, Mapping, Optional, Sequence

from batchqueue.core.entity import CoreData

from .validation import ValidateFunc


@unique
class AttributeType(str, Enum):
    STRING = "STRING"
    INT = "INT"
    LIST = "LIST"
    MAP = "MAP"


class ResourceConfigError(ValueError):
    def __init__(self, errors: List[str]) -> None:
        super().__init__("Invalid resource configuration: " + "; ".join(errors))
        self.errors = errors


class Attribute(CoreData):
    """Declaration of a single attribute of a resource.

    LIST attributes can declare a nested `elem` schema, in which case each item is expected to be a mapping validated
    against it. MAP attributes are string to string maps.
    """

    def __init__(
        self,
        type: AttributeType,
        required: bool = False,
        optional: bool = False,
        computed: bool = False,
        force_new: bool = False,
        max_items: Optional[int] = None,
        min_items: Optional[int] = None,
        elem: Optional["Schema"] = None,
        validate_funcs: Optional[Sequence[ValidateFunc]] = None,
    ) -> None:
        if required and (optional or computed):
            raise ValueError("A required attribute cannot be optional or computed!")
        self.type = type
        self.required = required
        self.optional = optional
        self.computed = computed
        self.force_new = force_new
        self.max_items = max_items
        self.min_items = min_items
        self.elem = elem
        self.validate_funcs = list(validate_funcs) if validate_funcs else []

    @property
    def computed_only(self) -> bool:
        return self.computed and not (self.required or self.optional)


Schema = Dict[str, Attribute]


def _check_type(attr: Attribute, value: Any, key: str) -> List[str]:
    if attr.type == AttributeType.STRING and not isinstance(value, str):
        return [f"{key!r} must be a string, got {type(value).__name__}"]
    if attr.type == AttributeType.INT and (not isinstance(value, int) or isinstance(value, bool)):
        return [f"{key!r} must be an integer, got {type(value).__name__}"]
    if attr.type == AttributeType.MAP:
        if not isinstance(value, Mapping):
            return [f"{key!r} must be a map, got {type(value).__name__}"]
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
            return [f"{key!r} must be a map of strings"]
    if attr.type == AttributeType.LIST:
        if not isinstance(value, (list, tuple)):
            return [f"{key!r} must be a list, got {type(value).__name__}"]
        errors = []
        if attr.max_items is not None and len(value) > attr.max_items:
            errors.append(f"{key!r}: attribute supports {attr.max_items} item(s) maximum, config has {len(value)} declared")
        if attr.min_items is not None and len(value) < attr.min_items:
            errors.append(f"{key!r}: attribute requires {attr.min_items} item(s) minimum, config has {len(value)} declared")
        if attr.elem is not None:
            for i, item in enumerate(value):
                if not isinstance(item, Mapping):
                    errors.append(f"{key}.{i} must be a map, got {type(item).__name__}")
                else:
                    errors.extend(validate_config(attr.elem, item, prefix=f"{key}.{i}."))
        return errors
    return []


def validate_config(schema: Schema, config: Mapping[str, Any], prefix: str = "") -> List[str]:
    """Check user config against the schema, return all of the violations (empty list if valid)."""
    errors: List[str] = []
    for key in config.keys():
        if key not in schema:
            errors.append(f"An argument named {prefix + key!r} is not expected here")

    for key, attr in schema.items():
        full_key = prefix + key
        value = config.get(key, None)
        if value is None:
            if attr.required:
                errors.append(f"The argument {full_key!r} is required, but no definition was found")
            continue
        if attr.computed_only:
            errors.append(f"{full_key!r}: computed attributes cannot be set")
            continue

        type_errors = _check_type(attr, value, full_key)
        if type_errors:
            errors.extend(type_errors)
            continue

        for validate in attr.validate_funcs:
            errors.extend(validate(value, full_key))
    return errors
