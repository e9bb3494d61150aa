# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0

import codecs
import copy
import zlib
from typing import Any, Optional, TypeVar

import dill as pickle

"""Module to contain our Serialization primitives.

Requirements:
- our serializer should not call __init__ on new objects during deserialization.
"""

BATCHQUEUE_COMPRESSION_MAGIC: str = "_BatchQueue_ZIP_"


def loads(dump_str: str) -> Any:
    if dump_str.startswith(BATCHQUEUE_COMPRESSION_MAGIC):
        dump_str = dump_str[len(BATCHQUEUE_COMPRESSION_MAGIC) :]
        decoded_dump = zlib.decompress(codecs.decode(dump_str.encode(), "base64"))
    else:
        decoded_dump = codecs.decode(dump_str.encode(), "base64")
    return pickle.loads(decoded_dump)


def dumps(obj: Any, compress: Optional[bool] = False) -> str:
    pickled: bytes = pickle.dumps(obj)
    if compress:
        return BATCHQUEUE_COMPRESSION_MAGIC + codecs.encode(zlib.compress(pickled), "base64").decode()
    return codecs.encode(pickled, "base64").decode()


_Serialized = TypeVar("_Serialized")


class Serializable:
    def serialize(self, check_unsafe: bool = False, compress: bool = False) -> str:
        serializable = self
        if check_unsafe:
            serializable = self.serializable_copy()
        return dumps(serializable, compress)

    @classmethod
    def deserialize(cls, serialized_str: str) -> _Serialized:  # type: ignore
        return loads(serialized_str)

    def serializable_copy(self) -> _Serialized:
        shallow_copy = copy.copy(self)
        shallow_copy._serializable_copy_init(self)
        return shallow_copy

    def _serializable_copy_init(self, org_instance: _Serialized) -> None:
        """This is a chance for classes to align their unsafe, nonserializable fields (e.g boto3 clients).
        Default behaviour is nothing, which means that the ultimate result would be equivalent to unsafe=True.
        """
        pass
