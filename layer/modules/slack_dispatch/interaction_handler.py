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
Interaction handler module for interactive UI callbacks.
'''

from __future__ import annotations

import logging

from .models import InteractionCallback

logger = logging.getLogger()


async def handle_interaction(interaction: InteractionCallback) -> None:
    '''
    Record the selections reported by an interactive callback.

    Only block_actions callbacks carry selections. Every other interaction
    type is observed and otherwise ignored. No reply is sent.

    Args:
        interaction: The classified interaction callback.
    '''
    logger.info(f'The action called is: {interaction.action_id}')
    logger.info(f'The response was of type: {interaction.type}')

    if interaction.type != InteractionCallback.BLOCK_ACTIONS:
        return

    for action in interaction.block_actions:
        logger.info(f'Block action: {action}')
        logger.info(f'Selected options: {list(action.selected_options)}')
