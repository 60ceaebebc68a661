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
Handler for the /mom-gay slash command.

The command asks the caller a yes/no question with a checkbox group. The
question is returned as the acknowledgment payload rather than posted, and the
answer comes back later as a block_actions interaction.
'''

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from slack_sdk.models.attachments import BlockAttachment
from slack_sdk.models.blocks import CheckboxesElement, MarkdownTextObject, Option, SectionBlock

from .config import CONFIG
from .models import SlashCommand
from .slash_command_router import SlashCommandRouter

if TYPE_CHECKING:
    from slack_sdk_wrapper import SlackSdkWrapper

ANSWER_ACTION_ID = 'answer'


def build_checkbox_poll() -> BlockAttachment:
    '''
    Build the attachment holding the yes/no checkbox question.
    '''
    checkbox = CheckboxesElement(
        action_id=ANSWER_ACTION_ID,
        options=[
            Option(
                value='yes',
                text=MarkdownTextObject(text='Yes'),
                description=MarkdownTextObject(text='Really?'),
            ),
            Option(
                value='no',
                text=MarkdownTextObject(text='No'),
                description=MarkdownTextObject(text='You think?'),
            ),
        ],
    )

    return BlockAttachment(
        blocks=[
            SectionBlock(
                text=MarkdownTextObject(text='Do you want to answer the question?'),
                accessory=checkbox,
            ),
        ],
        color=CONFIG['hello_color'],
        fallback='Do you want to answer the question?',
    )


@SlashCommandRouter.register('/mom-gay')
async def handle_checkbox_poll_command(
    command: SlashCommand, slack_sdk_wrapper: SlackSdkWrapper  # pylint: disable=unused-argument
) -> Optional[dict]:
    '''
    Return the checkbox question as the acknowledgment payload.

    Nothing is posted through the send capability.
    '''
    return {
        'text': 'Please pick an answer.',
        'attachments': [build_checkbox_poll().to_dict()],
    }
