# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from typing import Optional, Any

class WebOsTvError(Exception):
  """Base class for all error exceptions defined by this package."""
  pass

class WebOsTvTimeoutError(WebOsTvError):
  """No matching response arrived from the TV within the request timeout."""
  pass

class WebOsTvSocketNotReadyError(WebOsTvError):
  """A request was attempted before the connection was registered with the TV,
     and registration did not complete within the ready timeout."""
  pass

class WebOsTvParseError(WebOsTvError):
  """An inbound frame could not be decoded. Never raised past the dispatch step."""
  pass

class WebOsTvInvalidArgumentError(WebOsTvError):
  """An argument was not a recognized value (e.g., an unknown sound output)."""
  pass

class WebOsTvTransportError(WebOsTvError):
  """A socket-level failure. Handled by the transport's reconnect loop."""
  pass

class WebOsTvPersistenceError(WebOsTvError):
  """The pairing credential could not be read from or written to disk."""
  pass

class WebOsTvCommandError(WebOsTvError):
  """The TV answered a request with an error frame."""
  error: Optional[str]
  payload: Optional[Any]

  def __init__(self, message: str, error: Optional[str]=None, payload: Optional[Any]=None):
      super().__init__(message)
      self.error = error
      self.payload = payload
