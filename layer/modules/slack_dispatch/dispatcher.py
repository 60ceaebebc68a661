# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

'''
Dispatch loop module.

This module provides the Dispatcher class that consumes the inbound event
stream and runs every event through classification, routing, handling and
acknowledgment.

Processing flow per event:
    1. Classify the envelope (classifier.classify)
    2. Route by envelope kind, then by inner event type or command name
    3. Run the handler, bounded by the handler timeout
    4. Acknowledge the event exactly once, whatever happened in 1-3

The loop hands each event to its own task, with at most ``worker_count``
events in flight. A worker count of 1 keeps strict arrival order.
'''

from __future__ import annotations

import asyncio
from enum import Enum
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Optional, Set, Tuple

from .acknowledgment import AcknowledgmentCoordinator
from .classifier import Classification, classify
from .config import CONFIG
from .events_api_router import EventsApiRouter
from .interaction_handler import handle_interaction
from .models import EnvelopeKind, InboundEvent
from .slash_command_router import SlashCommandRouter

if TYPE_CHECKING:
    from slack_sdk_wrapper import SlackSdkWrapper

logger = logging.getLogger()


class DispatcherState(Enum):
    RUNNING = 'running'
    SHUTTING_DOWN = 'shutting_down'


class Dispatcher:
    '''
    Single consumer of the inbound event stream.

    No error raised while handling an event ends the loop. Only the
    cancellation signal does.

    Attributes:
        slack_sdk_wrapper: Send capability injected into every handler.
        acknowledgment_coordinator: Sends the acknowledgment of every event.
        worker_count: Maximum number of events processed concurrently.
        handler_timeout_seconds: Upper bound on a single handler invocation.
        shutdown_timeout_seconds: Grace period for in-flight events on shutdown.
        state: Current state of the loop.
    '''

    def __init__(  # pylint: disable=too-many-arguments
        self,
        slack_sdk_wrapper: SlackSdkWrapper,
        acknowledgment_coordinator: AcknowledgmentCoordinator,
        worker_count: Optional[int] = None,
        handler_timeout_seconds: Optional[float] = None,
        shutdown_timeout_seconds: Optional[float] = None,
        events_api_router: Optional[EventsApiRouter] = None,
        slash_command_router: Optional[SlashCommandRouter] = None,
    ) -> None:
        self.slack_sdk_wrapper = slack_sdk_wrapper
        self.acknowledgment_coordinator = acknowledgment_coordinator

        self.worker_count = max(1, worker_count or CONFIG['worker_count'])
        self.handler_timeout_seconds = (
            handler_timeout_seconds
            if handler_timeout_seconds is not None
            else CONFIG['handler_timeout_seconds']
        )
        self.shutdown_timeout_seconds = (
            shutdown_timeout_seconds
            if shutdown_timeout_seconds is not None
            else CONFIG['shutdown_timeout_seconds']
        )

        self.events_api_router = events_api_router or EventsApiRouter()
        self.slash_command_router = slash_command_router or SlashCommandRouter()

        self.state = DispatcherState.RUNNING
        self._in_flight: Set[asyncio.Task] = set()

    async def _handle(self, classification: Classification) -> Optional[dict]:
        if classification.kind is EnvelopeKind.EVENTS_API:
            await self.events_api_router.route(classification.payload, self.slack_sdk_wrapper)
            return None

        if classification.kind is EnvelopeKind.SLASH_COMMANDS:
            return await self.slash_command_router.route(
                classification.payload, self.slack_sdk_wrapper
            )

        if classification.kind is EnvelopeKind.INTERACTIVE:
            await handle_interaction(classification.payload)
            return None

        logger.info(f'Ignoring event of unrouted kind: {classification.kind.value}')
        return None

    async def process(self, event: InboundEvent) -> None:
        '''
        Run one event through the pipeline and acknowledge it.

        The acknowledgment is sent exactly once: after a skip, a success, an
        error, a timeout, or a cancellation during shutdown. Only slash
        command handlers produce a payload for it.

        Args:
            event: The event pulled off the inbound stream.
        '''
        payload: Optional[dict] = None
        try:
            classification = classify(event)
            if not classification.ok:
                logger.error(f'Skipping event that does not match its kind: {event.kind.value}')
            else:
                payload = await asyncio.wait_for(
                    self._handle(classification),
                    timeout=self.handler_timeout_seconds,
                )
        except asyncio.TimeoutError:
            logger.error(
                f'Handler for {event.kind.value} event timed out after '
                f'{self.handler_timeout_seconds} seconds'
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(
                f'Encountered exception while handling {event.kind.value} event: '
                f'{type(e).__name__}: {e}'
            )
        finally:
            await self.acknowledgment_coordinator.acknowledge(event.ack_token, payload)

    async def _process_and_release(
        self,
        event: InboundEvent,
        stream: asyncio.Queue[InboundEvent],
        semaphore: asyncio.Semaphore,
    ) -> None:
        try:
            await self.process(event)
        finally:
            stream.task_done()
            semaphore.release()

    @staticmethod
    async def _wait_or_cancel(
        awaitable: Awaitable[Any], cancel_event: asyncio.Event
    ) -> Tuple[bool, Any]:
        '''
        Wait for an awaitable unless the cancellation signal comes first.

        Returns:
            (True, result) if the awaitable completed, (False, None) otherwise.
        '''
        task = asyncio.ensure_future(awaitable)
        if cancel_event.is_set():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            return False, None

        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_task.cancel()

        # An item already taken off the stream must still be processed.
        if task in done:
            return True, task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        return False, None

    async def run(self, stream: asyncio.Queue[InboundEvent], cancel_event: asyncio.Event) -> None:
        '''
        Consume the inbound stream until the cancellation signal is raised.

        Args:
            stream: Queue of inbound events filled by the transport.
            cancel_event: Raised to stop pulling events and shut down.
        '''
        semaphore = asyncio.Semaphore(self.worker_count)
        logger.info(f'Dispatch loop running with {self.worker_count} workers')

        while True:
            acquired, _ = await self._wait_or_cancel(semaphore.acquire(), cancel_event)
            if not acquired:
                break

            pulled, event = await self._wait_or_cancel(stream.get(), cancel_event)
            if not pulled:
                semaphore.release()
                break

            task = asyncio.create_task(self._process_and_release(event, stream, semaphore))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)

        self.state = DispatcherState.SHUTTING_DOWN
        logger.info('Shutting down socket listener')
        await self._drain()

    async def _drain(self) -> None:
        if not self._in_flight:
            return

        logger.info(f'Waiting for {len(self._in_flight)} in-flight events')
        _, pending = await asyncio.wait(
            set(self._in_flight),
            timeout=self.shutdown_timeout_seconds,
        )

        for task in pending:
            task.cancel()

        if pending:
            logger.error(f'Cancelled {len(pending)} events still in flight at shutdown')
            await asyncio.gather(*pending, return_exceptions=True)
