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
Events API router module.

This module provides the EventsApiRouter class that unwraps Events API
envelopes and forwards the inner event to the handler registered for its type.
'''

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Tuple, Type

from .exceptions import UnsupportedEventType
from .models import EventsApiEnvelope

if TYPE_CHECKING:
    from slack_sdk_wrapper import SlackSdkWrapper

logger = logging.getLogger()

InnerEventHandler = Callable[[Any, 'SlackSdkWrapper'], Awaitable[None]]


class EventsApiRouter:  # pylint: disable=too-few-public-methods
    '''
    Router for the inner events of Events API callbacks.

    Inner event handlers self-register by adding themselves to the class-level
    dictionary when their modules are imported, together with the record type
    their inner event is parsed into. Inner event types without a registered
    handler are ignored, so new Slack event subscriptions never fail the loop.

    Attributes:
        inner_event_handlers: Dict mapping inner event types (e.g. 'app_mention')
                              to (record type, handler) pairs.
    '''

    inner_event_handlers: Dict[str, Tuple[Type[Any], InnerEventHandler]] = {}

    @classmethod
    def register(
        cls, inner_event_type: str, record_type: Type[Any]
    ) -> Callable[[InnerEventHandler], InnerEventHandler]:
        '''
        Register a handler for an inner event type.

        Args:
            inner_event_type: The Slack inner event type (e.g. 'app_mention').
            record_type: Record class with a ``from_payload`` constructor.

        Returns:
            A decorator that registers and returns the handler unchanged.
        '''

        def decorator(handler: InnerEventHandler) -> InnerEventHandler:
            cls.inner_event_handlers[inner_event_type] = (record_type, handler)
            return handler

        return decorator

    async def route(self, envelope: EventsApiEnvelope, slack_sdk_wrapper: SlackSdkWrapper) -> None:
        '''
        Route an Events API envelope to the handler of its inner event.

        Args:
            envelope: The classified Events API envelope.
            slack_sdk_wrapper: Send capability passed on to the handler.

        Raises:
            UnsupportedEventType: If the envelope is not an event callback.
            NotHandledException: If a registered inner event is malformed.
            Exception: Anything raised by the inner event handler.
        '''
        if envelope.type != EventsApiEnvelope.CALLBACK_EVENT:
            raise UnsupportedEventType(f'Unsupported event type: {envelope.type}')

        inner_event = envelope.inner_event
        registration = self.inner_event_handlers.get(inner_event.type)  # type: ignore[arg-type]
        if registration is None:
            logger.debug(f'Ignoring inner event type: {inner_event.type}')
            return

        record_type, handler = registration
        data = inner_event.data
        if not isinstance(data, record_type):
            data = record_type.from_payload(data)

        await handler(data, slack_sdk_wrapper)
