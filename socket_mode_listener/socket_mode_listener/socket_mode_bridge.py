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
Socket Mode bridge module.

This module connects the Slack Socket Mode client to the dispatch loop: it
turns every Socket Mode request into an inbound event on the stream, and turns
acknowledgments back into Socket Mode responses.
'''

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from slack_sdk.socket_mode.request import SocketModeRequest
from slack_sdk.socket_mode.response import SocketModeResponse

from slack_dispatch import AckToken, EnvelopeKind, InboundEvent

if TYPE_CHECKING:
    from slack_sdk.socket_mode.aiohttp import SocketModeClient

logger = logging.getLogger()


class SocketModeBridge:
    '''
    Adapter between the Socket Mode client and the inbound event stream.

    ``enqueue`` is registered as a Socket Mode request listener and ``ack``
    is the acknowledgment sender of the AcknowledgmentCoordinator.
    '''

    def __init__(
        self,
        socket_mode_client: SocketModeClient,  # pylint: disable=undefined-variable
        stream: asyncio.Queue[InboundEvent],
    ) -> None:
        self.socket_mode_client = socket_mode_client
        self.stream = stream

    @staticmethod
    def to_inbound_event(request: SocketModeRequest) -> InboundEvent:
        '''
        Convert a Socket Mode request into an inbound event.

        Args:
            request: The request received over the socket.

        Returns:
            An inbound event carrying the raw payload and the envelope id as
            acknowledgment token.
        '''
        token = AckToken(request.envelope_id) if request.envelope_id else None
        return InboundEvent(
            kind=EnvelopeKind.from_request_type(request.type),
            payload=request.payload,
            ack_token=token,
        )

    async def enqueue(
        self,
        client: SocketModeClient,  # pylint: disable=unused-argument,undefined-variable
        request: SocketModeRequest,
    ) -> None:
        '''
        Socket Mode request listener putting the request on the stream.

        The Socket Mode client runs every listener call as its own task, so
        this never waits for room on the stream. A request arriving while the
        stream is full is acknowledged without a payload and dropped, which
        also stops Slack from redelivering it.
        '''
        if request.retry_attempt:
            logger.info(
                f'Slack retried envelope {request.envelope_id} '
                f'(attempt {request.retry_attempt}, reason {request.retry_reason})'
            )

        event = self.to_inbound_event(request)
        try:
            self.stream.put_nowait(event)
        except asyncio.QueueFull:
            logger.error(
                f'Inbound stream full ({self.stream.maxsize} events), '
                f'dropping {event.kind.value} envelope {request.envelope_id}'
            )
            await self.drop(event)

    async def drop(self, event: InboundEvent) -> None:
        '''
        Acknowledge an event that will not be processed.

        Args:
            event: The event rejected by the stream.
        '''
        if event.ack_token is None:
            return

        event.ack_token.consume()
        try:
            await self.ack(event.ack_token)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f'Failed to acknowledge dropped envelope {event.ack_token.envelope_id}: {e}')

    async def ack(self, token: AckToken, payload: Optional[dict] = None) -> None:
        '''
        Send the Socket Mode response acknowledging an envelope.

        Args:
            token: The acknowledgment token of the envelope.
            payload: Optional response payload, e.g. a slash command reply.
        '''
        await self.socket_mode_client.send_socket_mode_response(
            SocketModeResponse(envelope_id=token.envelope_id, payload=payload)
        )
