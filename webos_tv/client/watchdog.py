# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Sound output watchdog.

Some TVs occasionally drop their audio output routing back to the built-in
speakers (e.g., after an HDMI-ARC renegotiation). The watchdog periodically
polls the current sound output and switches it back to the desired value
whenever it has drifted. At most one watchdog task runs per client.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..constants import WATCHDOG_POLL_INTERVAL
from ..exceptions import WebOsTvError, WebOsTvInvalidArgumentError
from ..pkg_logging import logger
from ..protocol import Endpoint, SoundOutput, InboundFrame, sound_output_values

from .session import ConnectionSession

Requester = Callable[[str, Optional[JsonableDict]], Awaitable[InboundFrame]]
"""Sends a request for a relative ssap path and returns the answering frame."""

class SoundOutputWatchdog:
    session: ConnectionSession
    poll_interval_secs: float
    quirk_mode: bool
    """If True, a failed correction is retried as desired -> tv_speaker -> desired."""

    _request: Requester
    _desired_output: Optional[SoundOutput] = None
    _task: Optional[asyncio.Task[None]] = None
    poll_count: int = 0
    correction_count: int = 0

    def __init__(
            self,
            session: ConnectionSession,
            request: Requester,
            poll_interval_secs: float=WATCHDOG_POLL_INTERVAL,
            quirk_mode: bool=False,
          ) -> None:
        self.session = session
        self._request = request
        self.poll_interval_secs = poll_interval_secs
        self.quirk_mode = quirk_mode

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def desired_output(self) -> Optional[SoundOutput]:
        return self._desired_output

    async def start(self, desired_output: Union[SoundOutput, str]) -> Optional[WebOsTvInvalidArgumentError]:
        """Starts pinning the sound output to desired_output.

        Any previously running watchdog is stopped first. If desired_output is
        not a recognized sound output, the error is returned rather than
        raised, and nothing is scheduled.
        """
        output = SoundOutput.parse(desired_output)
        if output is None:
            return WebOsTvInvalidArgumentError(
                f"Unknown sound output {desired_output!r}; expected one of {', '.join(sound_output_values)}")
        # _task is replaced before the old task is awaited; overlapping starts leave one task
        old_task = self._task
        self._desired_output = output
        self._task = asyncio.create_task(self._run())
        logger.info(f"{self}: Started (poll interval {self.poll_interval_secs} seconds)")
        await self._cancel_task(old_task)
        return None

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if await self._cancel_task(task):
            logger.info(f"{self}: Stopped")

    async def _cancel_task(self, task: Optional[asyncio.Task[None]]) -> bool:
        if task is None or task.done():
            return False
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        return True

    async def _set_output(self, output: SoundOutput) -> InboundFrame:
        return await self._request(Endpoint.CHANGE_SOUND_OUTPUT.value, { "output": output.value })

    async def check_once(self) -> bool:
        """Polls the sound output and corrects it if it has drifted.

        Returns True if a correction was sent. Does nothing unless the
        connection is registered.
        """
        desired = self._desired_output
        if desired is None or not self.session.is_registered:
            return False
        self.poll_count += 1
        frame = await self._request(Endpoint.GET_SOUND_OUTPUT.value, None)
        if frame.is_error:
            raise WebOsTvError(f"Unable to get sound output: {frame.error}")
        current = None if frame.payload is None else frame.payload.get("soundOutput")
        if current == desired.value:
            return False
        logger.warning(f"{self}: Sound output is {current!r}; switching back to {desired.value!r}")
        self.correction_count += 1
        result = await self._set_output(desired)
        if self.quirk_mode and (result.is_error or result.return_value is False):
            logger.warning(f"{self}: Switch to {desired.value!r} failed; cycling through {SoundOutput.INTERNAL_SPEAKER.value!r}")
            for output in (desired, SoundOutput.INTERNAL_SPEAKER, desired):
                await self._set_output(output)
        return True

    async def _run(self) -> None:
        while True:
            try:
                await self.check_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(f"{self}: Sound output check failed: {e}")
            await asyncio.sleep(self.poll_interval_secs)

    def __str__(self) -> str:
        desired = None if self._desired_output is None else self._desired_output.value
        return f"SoundOutputWatchdog(desired={desired})"

    def __repr__(self) -> str:
        return str(self)
