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
Event dispatch package for the Slack Socket Mode bot.

This package classifies the events delivered over a Socket Mode connection,
routes them to handlers by a two-level tag and acknowledges every one of them
exactly once.

Routing:
    InboundEvent
    ├── events_api     -> EventsApiRouter (by inner event type)
    │   └── app_mention   -> handle_app_mention
    ├── slash_commands -> SlashCommandRouter (by command name)
    │   ├── /hello        -> handle_hello_command (posts a reply)
    │   └── /mom-gay      -> handle_checkbox_poll_command (reply rides on the ack)
    └── interactive    -> handle_interaction

Usage:
    >>> from slack_dispatch import AcknowledgmentCoordinator, Dispatcher
    >>> dispatcher = Dispatcher(slack_sdk_wrapper, AcknowledgmentCoordinator(bridge.ack))
    >>> await dispatcher.run(queue, cancel_event)

Architecture:
    - Handlers self-register with their router when imported
    - Unknown inner event types, commands and interaction types are ignored
    - The send capability is injected into every handler
'''

from .models import (
    AckToken,
    AppMentionEvent,
    BlockAction,
    EnvelopeKind,
    EventsApiEnvelope,
    InboundEvent,
    InnerEvent,
    InteractionCallback,
    SlashCommand,
)
from .classifier import Classification, classify
from .events_api_router import EventsApiRouter
from .slash_command_router import SlashCommandRouter
from .app_mention_handler import handle_app_mention
from .hello_command import handle_hello_command
from .checkbox_poll_command import handle_checkbox_poll_command
from .interaction_handler import handle_interaction
from .acknowledgment import AcknowledgmentCoordinator
from .dispatcher import Dispatcher, DispatcherState

__all__ = [
    'AckToken',
    'AppMentionEvent',
    'BlockAction',
    'EnvelopeKind',
    'EventsApiEnvelope',
    'InboundEvent',
    'InnerEvent',
    'InteractionCallback',
    'SlashCommand',
    'Classification',
    'classify',
    'EventsApiRouter',
    'SlashCommandRouter',
    'handle_app_mention',
    'handle_hello_command',
    'handle_checkbox_poll_command',
    'handle_interaction',
    'AcknowledgmentCoordinator',
    'Dispatcher',
    'DispatcherState',
]
