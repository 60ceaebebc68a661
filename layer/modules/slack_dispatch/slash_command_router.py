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
Slash command router module.

This module provides the SlashCommandRouter class that dispatches slash
commands by exact name to the handlers registered in its command table.
'''

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, Optional

from .models import SlashCommand

if TYPE_CHECKING:
    from slack_sdk_wrapper import SlackSdkWrapper

logger = logging.getLogger()

SlashCommandHandler = Callable[[SlashCommand, 'SlackSdkWrapper'], Awaitable[Optional[dict]]]


class SlashCommandRouter:  # pylint: disable=too-few-public-methods
    '''
    Router for slash commands.

    Command handlers self-register in the class-level table when their modules
    are imported. A handler either posts its reply itself and returns None, or
    returns a payload that is attached to the acknowledgment of the command.

    Attributes:
        commands: Dict mapping command names (e.g. '/hello') to handlers.
    '''

    commands: Dict[str, SlashCommandHandler] = {}

    @classmethod
    def register(cls, command_name: str) -> Callable[[SlashCommandHandler], SlashCommandHandler]:
        '''
        Register a handler under a command name.

        Args:
            command_name: The slash command, including the leading slash.

        Returns:
            A decorator that registers and returns the handler unchanged.
        '''

        def decorator(handler: SlashCommandHandler) -> SlashCommandHandler:
            cls.commands[command_name] = handler
            return handler

        return decorator

    async def route(
        self, command: SlashCommand, slack_sdk_wrapper: SlackSdkWrapper
    ) -> Optional[dict]:
        '''
        Dispatch a slash command to its handler.

        Unknown commands are accepted and ignored: no reply, no error.

        Args:
            command: The classified slash command.
            slack_sdk_wrapper: Send capability passed on to the handler.

        Returns:
            The acknowledgment payload returned by the handler, if any.
        '''
        handler = self.commands.get(command.command)
        if handler is None:
            logger.info(f'Ignoring unknown slash command: {command.command}')
            return None

        logger.info(f'Handling slash command {command.command} from {command.user_name}')
        return await handler(command, slack_sdk_wrapper)
