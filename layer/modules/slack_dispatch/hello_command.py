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
Handler for the /hello slash command.
'''

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from slack_sdk.models.attachments import Attachment, AttachmentField

from .config import CONFIG
from .models import SlashCommand
from .slash_command_router import SlashCommandRouter

if TYPE_CHECKING:
    from slack_sdk_wrapper import SlackSdkWrapper


@SlashCommandRouter.register('/hello')
async def handle_hello_command(
    command: SlashCommand, slack_sdk_wrapper: SlackSdkWrapper
) -> Optional[dict]:
    '''
    Greet the command text in the channel the command was typed in.

    This is a fire-and-forget command: the reply is posted directly and
    nothing is attached to the acknowledgment.
    '''
    attachment = Attachment(
        text=f'Hello {command.text}',
        color=CONFIG['hello_color'],
        fields=[
            AttachmentField(title='Date', value=str(datetime.now()), short=False),
            AttachmentField(title='Initializer', value=command.user_name, short=False),
        ],
    )

    await slack_sdk_wrapper.post_message(command.channel_id, [attachment])
    return None
