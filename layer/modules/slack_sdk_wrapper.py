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
Slack SDK wrapper module for simplified Slack operations.

This module provides a simplified asynchronous interface for the Slack Web API
calls the bot handlers need: looking up a user and posting a message.
'''

from __future__ import annotations

from typing import Optional, Sequence

from slack_sdk.errors import SlackClientError
from slack_sdk.http_retry.builtin_async_handlers import (
    AsyncConnectionErrorRetryHandler,
    AsyncRateLimitErrorRetryHandler,
)
from slack_sdk.models.attachments import Attachment
from slack_sdk.web.async_client import AsyncWebClient


class SlackSdkWrapper:
    '''
    A wrapper class for Slack SDK operations.

    This class is the send capability handed to every handler. Slack client
    errors are re-raised as wrapper exceptions that carry the failed
    destination, so a failed post can be told apart from a routing error.
    '''

    ClientException = SlackClientError

    class PostMessageError(Exception):
        '''
        Exception raised when a message could not be posted to a channel.

        Attributes:
            channel_id: The channel the message was destined for.
        '''

        def __init__(self, channel_id: str, message: str) -> None:
            super().__init__(f'Failed to post message to {channel_id}: {message}')
            self.channel_id = channel_id

    class UserLookupError(Exception):
        '''
        Exception raised when a user could not be resolved in the directory.

        Attributes:
            user_id: The user that could not be resolved.
        '''

        def __init__(self, user_id: str, message: str) -> None:
            super().__init__(f'Failed to look up user {user_id}: {message}')
            self.user_id = user_id

    def __init__(self, slack_token: Optional[str] = None) -> None:
        if slack_token:
            self.client = AsyncWebClient(token=slack_token)

            self.client.retry_handlers = [
                AsyncRateLimitErrorRetryHandler(3),
                AsyncConnectionErrorRetryHandler(3),
            ]

    async def get_user_name(self, user_id: str) -> str:
        '''
        Get the display name of a Slack user.

        Args:
            user_id: The ID of the user.

        Returns:
            The name of the user.

        Raises:
            UserLookupError: If the user cannot be retrieved from Slack.
        '''
        try:
            response = await self.client.users_info(user=user_id)
        except self.ClientException as e:
            raise self.UserLookupError(user_id, str(e)) from e

        name = (response.get('user') or {}).get('name')
        if not name:
            raise self.UserLookupError(user_id, 'user has no name')

        return name

    async def post_message(self, channel_id: str, attachments: Sequence[Attachment]) -> None:
        '''
        Post a message made of attachments to a Slack channel.

        Args:
            channel_id: The ID of the channel to post to.
            attachments: The attachments making up the message.

        Raises:
            PostMessageError: If the message cannot be posted.
        '''
        try:
            await self.client.chat_postMessage(channel=channel_id, attachments=attachments)
        except self.ClientException as e:
            raise self.PostMessageError(channel_id, str(e)) from e
