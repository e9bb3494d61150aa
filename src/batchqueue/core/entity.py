# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

from batchqueue.core.serialization import Serializable


class CoreData(Serializable):
    """Value semantics for job queue records (desired/observed queue, compute environment order, tag configs) and
    provider settings. Equality is by type and attributes, so a refreshed record can be compared against the one
    restored from a serialized state snapshot.
    """

    def __eq__(self, other) -> bool:
        return type(other) is type(self) and self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        return hash(tuple(sorted((k, repr(v)) for k, v in self.__dict__.items())))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({','.join([f'{name}={repr(value)}' for name, value in self.__dict__.items()])})"

    def __str__(self) -> str:
        return self.__repr__()
