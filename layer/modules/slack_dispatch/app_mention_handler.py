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
App mention handler module for replying when users mention the bot.
'''

from __future__ import annotations

from datetime import datetime
from enum import Enum
import logging
from typing import TYPE_CHECKING

from slack_sdk.models.attachments import Attachment, AttachmentField

from .config import CONFIG
from .events_api_router import EventsApiRouter
from .models import AppMentionEvent

if TYPE_CHECKING:
    from slack_sdk_wrapper import SlackSdkWrapper

logger = logging.getLogger()


class MentionReply(Enum):
    GREETING = 'greeting'
    GENERIC = 'generic'


def select_mention_reply(text: str) -> MentionReply:
    '''
    Pick the reply branch for a mention.

    Args:
        text: The raw text of the mention.

    Returns:
        GREETING if the lowercased text contains the greeting token, else GENERIC.
    '''
    if CONFIG['greeting_token'].lower() in text.lower():
        return MentionReply.GREETING

    return MentionReply.GENERIC


def build_mention_reply(reply: MentionReply, user_name: str) -> Attachment:
    '''
    Build the attachment answering a mention.

    Args:
        reply: The branch selected for the mention.
        user_name: The name of the user who mentioned the bot.

    Returns:
        The reply attachment.
    '''
    if reply is MentionReply.GREETING:
        pretext, color = 'Greetings!', CONFIG['greeting_color']
    else:
        pretext, color = 'How can I be of service?', CONFIG['generic_color']

    return Attachment(
        text=f'How can I help you {user_name}?',
        pretext=pretext,
        color=color,
        fields=[
            AttachmentField(title='Date', value=str(datetime.now()), short=False),
            AttachmentField(title='Initializer', value=user_name, short=False),
        ],
    )


@EventsApiRouter.register('app_mention', AppMentionEvent)
async def handle_app_mention(event: AppMentionEvent, slack_sdk_wrapper: SlackSdkWrapper) -> None:
    '''
    Reply in the channel where the bot was mentioned.

    The user name is resolved before anything is sent. A failed lookup
    propagates and nothing is posted.

    Args:
        event: The app mention event.
        slack_sdk_wrapper: Send capability.

    Raises:
        SlackSdkWrapper.UserLookupError: If the user cannot be resolved.
        SlackSdkWrapper.PostMessageError: If the reply cannot be posted.
    '''
    user_name = await slack_sdk_wrapper.get_user_name(event.user)

    reply = select_mention_reply(event.text)
    logger.info(f'Replying to mention by {user_name} in {event.channel} with {reply.value} reply')

    await slack_sdk_wrapper.post_message(event.channel, [build_mention_reply(reply, user_name)])
