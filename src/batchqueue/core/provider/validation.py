# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import re
from typing import Any, Callable, List, Sequence

# (value, key) -> list of error messages (empty if valid)
ValidateFunc = Callable[[Any, str], List[str]]

# refer https://docs.aws.amazon.com/batch/latest/APIReference/API_CreateJobQueue.html
BATCH_NAME_PATTERN = re.compile(r"^[0-9a-zA-Z][0-9a-zA-Z_\-]{0,127}$")


def int_at_least(minimum: int) -> ValidateFunc:
    def _validate(value: Any, key: str) -> List[str]:
        if not isinstance(value, int) or isinstance(value, bool):
            return [f"expected type of {key!r} to be integer"]
        if value < minimum:
            return [f"expected {key!r} to be at least ({minimum}), got {value}"]
        return []

    return _validate


def string_in_slice(valid: Sequence[str], ignore_case: bool = False) -> ValidateFunc:
    def _validate(value: Any, key: str) -> List[str]:
        if not isinstance(value, str):
            return [f"expected type of {key!r} to be string"]
        for candidate in valid:
            if value == candidate or (ignore_case and value.lower() == candidate.lower()):
                return []
        return [f"expected {key!r} to be one of {list(valid)!r}, got {value!r}"]

    return _validate


def validate_batch_name(value: Any, key: str) -> List[str]:
    if not isinstance(value, str) or not BATCH_NAME_PATTERN.match(value):
        return [
            f"{key!r} ({value!r}) must be up to 128 letters (uppercase and lowercase), numbers, underscores and dashes, "
            f"and must start with an alphanumeric."
        ]
    return []
