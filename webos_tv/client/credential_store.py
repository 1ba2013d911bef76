# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
webOS TV pairing credential store.

Each TV address has at most one credential (the "client-key" issued by the TV
when pairing is confirmed on screen), stored as a raw UTF-8 file named after
the address inside a key directory. The directory is created on demand.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..internal_types import *
from ..exceptions import WebOsTvPersistenceError
from ..pkg_logging import logger

class CredentialStore:
    """Reads and writes pairing credentials, keyed by TV address."""

    key_dir: Path

    def __init__(self, key_dir: Union[str, os.PathLike]) -> None:
        self.key_dir = Path(key_dir)

    def key_path(self, address: str) -> Path:
        """Returns the path of the credential file for a TV address."""
        if address == '' or address in ('.', '..'):
            raise WebOsTvPersistenceError(f"Invalid TV address for credential file: {address!r}")
        filename = address.replace('/', '_').replace('\\', '_')
        return self.key_dir / filename

    def load(self, address: str) -> Optional[str]:
        """Returns the stored credential for a TV address, or None if there is none.

        Raises WebOsTvPersistenceError if the file exists but cannot be read.
        """
        path = self.key_path(address)
        try:
            key = path.read_text(encoding='utf-8').strip()
        except FileNotFoundError:
            logger.debug(f"No pairing key stored for {address} at {path}")
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise WebOsTvPersistenceError(f"Unable to read pairing key for {address} from {path}: {e}") from e
        if key == '':
            return None
        logger.debug(f"Loaded pairing key for {address} from {path}")
        return key

    def save(self, address: str, key: str) -> None:
        """Stores the credential for a TV address, creating the key directory if necessary.

        Raises WebOsTvPersistenceError on any I/O failure.
        """
        path = self.key_path(address)
        try:
            self.key_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(key, encoding='utf-8')
        except OSError as e:
            raise WebOsTvPersistenceError(f"Unable to write pairing key for {address} to {path}: {e}") from e
        logger.info(f"Saved pairing key for {address} to {path}")

    def __str__(self) -> str:
        return f"CredentialStore({self.key_dir})"

    def __repr__(self) -> str:
        return str(self)
