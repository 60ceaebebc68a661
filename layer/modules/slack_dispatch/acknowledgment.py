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
Acknowledgment coordinator module.

Socket Mode requires every envelope to be acknowledged, otherwise Slack
resends it. This module ties each acknowledgment to its token exactly once.
'''

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from .exceptions import AlreadyAcknowledged
from .models import AckToken

logger = logging.getLogger()

AckSender = Callable[[AckToken, Optional[dict]], Awaitable[None]]


class AcknowledgmentCoordinator:  # pylint: disable=too-few-public-methods
    '''
    Sends the single acknowledgment owed for each inbound event.

    The token is consumed before the transport call, so a failing transport
    never leads to a second acknowledgment of the same envelope. Transport
    failures are logged and swallowed to keep the dispatch loop alive.
    '''

    def __init__(self, ack_sender: AckSender) -> None:
        '''
        Initialize the coordinator.

        Args:
            ack_sender: Coroutine function sending the acknowledgment for a
                        token, optionally carrying a response payload.
        '''
        self.ack_sender = ack_sender

    async def acknowledge(self, token: Optional[AckToken], payload: Optional[dict] = None) -> bool:
        '''
        Acknowledge an event.

        Args:
            token: The acknowledgment token of the event.
            payload: Optional response payload attached to the acknowledgment.

        Returns:
            True if the acknowledgment was handed to the transport.
        '''
        if token is None:
            logger.error('Cannot acknowledge an event without an acknowledgment token')
            return False

        try:
            token.consume()
        except AlreadyAcknowledged as e:
            logger.error(f'Refusing duplicate acknowledgment: {e}')
            return False

        logger.info(f'Acknowledging envelope: {token.envelope_id}, payload: {payload is not None}')
        try:
            await self.ack_sender(token, payload)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error(f'Failed to acknowledge envelope {token.envelope_id}: {e}')
            return False

        return True
