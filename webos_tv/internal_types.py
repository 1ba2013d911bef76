# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Type hints used internally by this package"""

from __future__ import annotations

from typing import (
    Dict,
    List,
    Optional,
    Type,
    Union,
    Any,
    Tuple,
    Set,
    Callable,
    Awaitable,
    Mapping,
    Iterable,
    AsyncIterator,
    AsyncContextManager,
    TYPE_CHECKING,
  )

from types import TracebackType

from typing_extensions import Self, TypeAlias

Jsonable: TypeAlias = Union[str, int, float, bool, None, Dict[str, 'Jsonable'], List['Jsonable']]
"""A type hint for a simple JSON-serializable value; i.e., str, int, float, bool, None, Dict[str, Jsonable], List[Jsonable]"""

JsonableDict: TypeAlias = Dict[str, Jsonable]
"""A type hint for a simple JSON-serializable dict; i.e., Dict[str, Jsonable]"""

__all__ = [
    'Dict', 'List', 'Optional', 'Type', 'Union', 'Any', 'Tuple', 'Set', 'Callable',
    'Awaitable', 'Mapping', 'Iterable', 'AsyncIterator', 'AsyncContextManager', 'TYPE_CHECKING',
    'TracebackType', 'Self', 'TypeAlias', 'Jsonable', 'JsonableDict',
]
