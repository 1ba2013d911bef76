# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SSAP wire frames.

All frames are JSON text messages sent over the WebSocket.

Outbound frames have the form:

    { "id": <str>, "type": "register" | "request", "uri": <str>, "payload": <object, optional> }

Inbound frames have the form:

    { "id": <str, optional>, "type": "response" | "registered" | "error",
      "payload": <object, optional>, "error": <str, optional> }
"""

from __future__ import annotations

import json
from enum import Enum

from ..internal_types import *
from ..exceptions import WebOsTvParseError
from ..constants import DEFAULT_PREFIX

class OutboundFrameType(str, Enum):
    REGISTER = "register"
    REQUEST = "request"

class InboundFrameType(str, Enum):
    RESPONSE = "response"
    REGISTERED = "registered"
    ERROR = "error"

class OutboundFrame:
    """A frame sent from the client to the TV"""
    id: str
    type: OutboundFrameType
    uri: Optional[str]
    payload: Optional[JsonableDict]

    def __init__(
            self,
            id: str,
            type: Union[OutboundFrameType, str],
            uri: Optional[str]=None,
            payload: Optional[JsonableDict]=None,
          ):
        self.id = id
        self.type = OutboundFrameType(type)
        self.uri = uri
        self.payload = payload

    @classmethod
    def create(
            cls,
            id: str,
            type: Union[OutboundFrameType, str],
            path: Optional[str]=None,
            payload: Optional[JsonableDict]=None,
            prefix: str=DEFAULT_PREFIX,
          ) -> Self:
        """Creates a frame from a relative path; the uri is prefix + path."""
        uri = None if path is None or path == '' else prefix + str(path)
        return cls(id, type, uri=uri, payload=payload)

    def to_jsonable(self) -> JsonableDict:
        result: JsonableDict = { "id": self.id, "type": self.type.value }
        if self.uri is not None:
            result["uri"] = self.uri
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_jsonable())

    def __str__(self) -> str:
        return f"OutboundFrame(id={self.id!r}, type={self.type.value}, uri={self.uri!r})"

    def __repr__(self) -> str:
        return str(self)

class InboundFrame:
    """A frame received from the TV"""
    id: Optional[str]
    type: InboundFrameType
    payload: Optional[JsonableDict]
    error: Optional[str]

    def __init__(
            self,
            type: Union[InboundFrameType, str],
            id: Optional[str]=None,
            payload: Optional[JsonableDict]=None,
            error: Optional[str]=None,
          ):
        self.type = InboundFrameType(type)
        self.id = id
        self.payload = payload
        self.error = error

    @property
    def is_response(self) -> bool:
        return self.type == InboundFrameType.RESPONSE

    @property
    def is_registered(self) -> bool:
        return self.type == InboundFrameType.REGISTERED

    @property
    def is_error(self) -> bool:
        return self.type == InboundFrameType.ERROR

    @property
    def return_value(self) -> Optional[bool]:
        """The "returnValue" field of the payload, if present."""
        if self.payload is None:
            return None
        value = self.payload.get("returnValue")
        return value if isinstance(value, bool) else None

    @classmethod
    def from_jsonable(cls, data: Any) -> Self:
        """Validates a decoded JSON value and creates a frame from it.

        Raises WebOsTvParseError if the value does not have the shape of an
        inbound frame.
        """
        if not isinstance(data, dict):
            raise WebOsTvParseError(f"Inbound frame is not a JSON object: {data!r}")
        frame_type = data.get("type")
        if frame_type not in ("response", "registered", "error"):
            raise WebOsTvParseError(f"Inbound frame has unrecognized type {frame_type!r}")
        frame_id = data.get("id")
        if frame_id is not None and not isinstance(frame_id, str):
            # Some firmware echoes numeric ids; normalize so they still correlate
            frame_id = str(frame_id)
        payload = data.get("payload")
        if payload is not None and not isinstance(payload, dict):
            raise WebOsTvParseError(f"Inbound frame payload is not a JSON object: {payload!r}")
        error = data.get("error")
        if error is not None and not isinstance(error, str):
            error = str(error)
        return cls(frame_type, id=frame_id, payload=payload, error=error)

    @classmethod
    def parse(cls, raw: Union[str, bytes]) -> Self:
        """Decodes a raw WebSocket message into a frame.

        Raises WebOsTvParseError on any decoding or shape failure.
        """
        try:
            if isinstance(raw, bytes):
                raw = raw.decode('utf-8')
            data = json.loads(raw)
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise WebOsTvParseError(f"Inbound frame is not valid JSON: {raw[:200]!r}") from e
        return cls.from_jsonable(data)

    def to_jsonable(self) -> JsonableDict:
        result: JsonableDict = { "type": self.type.value }
        if self.id is not None:
            result["id"] = self.id
        if self.payload is not None:
            result["payload"] = self.payload
        if self.error is not None:
            result["error"] = self.error
        return result

    def __str__(self) -> str:
        return f"InboundFrame(id={self.id!r}, type={self.type.value})"

    def __repr__(self) -> str:
        return str(self)
