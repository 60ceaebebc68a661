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
Typed records for the payloads delivered over Slack Socket Mode.

Each record is immutable and is built from the raw payload dictionary with a
checked ``from_payload`` constructor. A constructor never guesses: a payload
missing a required field raises NotHandledException.
'''

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .exceptions import AlreadyAcknowledged, NotHandledException


def _require_str(payload: dict, key: str, record: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise NotHandledException(f'Missing {key} in {record} payload: {payload}')
    return value


def _require_dict(payload: Any, record: str) -> dict:
    if not isinstance(payload, dict):
        raise NotHandledException(f'Expected a dictionary for {record}, got {type(payload).__name__}')
    return payload


class EnvelopeKind(Enum):
    '''
    Top-level kind of a Socket Mode envelope.

    The values match the ``type`` field of a Socket Mode request. Anything the
    bot does not route (e.g. a future envelope type) is OTHER.
    '''

    EVENTS_API = 'events_api'
    SLASH_COMMANDS = 'slash_commands'
    INTERACTIVE = 'interactive'
    OTHER = 'other'

    @classmethod
    def from_request_type(cls, request_type: Optional[str]) -> EnvelopeKind:
        '''
        Map a Socket Mode request type onto an envelope kind.

        Args:
            request_type: The ``type`` field of the Socket Mode request.

        Returns:
            The matching kind, or OTHER for unknown or missing types.
        '''
        try:
            return cls(request_type)
        except ValueError:
            return cls.OTHER


class AckToken:
    '''
    Correlation handle tying an acknowledgment to its Socket Mode envelope.

    A token can be consumed once. Consuming it again raises AlreadyAcknowledged.
    '''

    def __init__(self, envelope_id: str) -> None:
        self.envelope_id = envelope_id
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    def consume(self) -> None:
        if self._consumed:
            raise AlreadyAcknowledged(f'Envelope already acknowledged: {self.envelope_id}')
        self._consumed = True

    def __repr__(self) -> str:
        return f'AckToken({self.envelope_id!r}, consumed={self._consumed})'


@dataclass(frozen=True)
class InboundEvent:
    '''
    A single event pulled off the inbound stream.

    Attributes:
        kind: The kind declared by the transport.
        payload: Raw payload dictionary, or an already typed record.
        ack_token: Handle used to acknowledge the envelope.
    '''

    kind: EnvelopeKind
    payload: Any
    ack_token: Optional[AckToken] = None


@dataclass(frozen=True)
class AppMentionEvent:
    '''
    The bot was mentioned with @bot_name in a channel.
    '''

    user: str
    channel: str
    text: str = ''
    ts: Optional[str] = None
    thread_ts: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> AppMentionEvent:
        payload = _require_dict(payload, 'app_mention')
        text = payload.get('text') or ''
        if not isinstance(text, str):
            raise NotHandledException(f'Invalid text in app_mention payload: {payload}')

        return cls(
            user=_require_str(payload, 'user', 'app_mention'),
            channel=_require_str(payload, 'channel', 'app_mention'),
            text=text,
            ts=payload.get('ts'),
            thread_ts=payload.get('thread_ts'),
        )


@dataclass(frozen=True)
class InnerEvent:
    '''
    The event wrapped by an Events API callback.

    ``data`` holds the raw inner event dictionary. It is parsed into a typed
    record only by the router, for inner types that have a registered handler.
    '''

    type: Optional[str]
    data: Any = field(default_factory=dict)


@dataclass(frozen=True)
class EventsApiEnvelope:
    '''
    Events API wrapper delivered with the 'events_api' envelope kind.
    '''

    CALLBACK_EVENT = 'event_callback'

    type: str
    inner_event: InnerEvent
    event_id: Optional[str] = None
    team_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> EventsApiEnvelope:
        payload = _require_dict(payload, 'events_api')
        envelope_type = _require_str(payload, 'type', 'events_api')

        inner = payload.get('event', {})
        if not isinstance(inner, dict):
            raise NotHandledException(f'Invalid inner event in events_api payload: {payload}')

        return cls(
            type=envelope_type,
            inner_event=InnerEvent(type=inner.get('type'), data=inner),
            event_id=payload.get('event_id'),
            team_id=payload.get('team_id'),
        )


@dataclass(frozen=True)
class SlashCommand:
    '''
    A slash command typed by a user, e.g. ``/hello world``.
    '''

    command: str
    channel_id: str
    user_name: str = ''
    text: str = ''
    user_id: Optional[str] = None
    trigger_id: Optional[str] = None
    response_url: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> SlashCommand:
        payload = _require_dict(payload, 'slash_commands')

        return cls(
            command=_require_str(payload, 'command', 'slash_commands'),
            channel_id=_require_str(payload, 'channel_id', 'slash_commands'),
            user_name=payload.get('user_name') or '',
            text=payload.get('text') or '',
            user_id=payload.get('user_id'),
            trigger_id=payload.get('trigger_id'),
            response_url=payload.get('response_url'),
        )


@dataclass(frozen=True)
class BlockAction:
    '''
    A single interactive element selection (checkbox, button, select).
    '''

    action_id: Optional[str]
    block_id: Optional[str] = None
    type: Optional[str] = None
    value: Optional[str] = None
    selected_options: tuple[dict, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> BlockAction:
        payload = _require_dict(payload, 'block action')

        selected_options = list(payload.get('selected_options') or [])
        if payload.get('selected_option'):
            selected_options.append(payload['selected_option'])

        return cls(
            action_id=payload.get('action_id'),
            block_id=payload.get('block_id'),
            type=payload.get('type'),
            value=payload.get('value'),
            selected_options=tuple(selected_options),
        )


@dataclass(frozen=True)
class InteractionCallback:
    '''
    Interactive callback delivered with the 'interactive' envelope kind.
    '''

    BLOCK_ACTIONS = 'block_actions'

    type: str
    action_id: str = ''
    block_actions: tuple[BlockAction, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> InteractionCallback:
        payload = _require_dict(payload, 'interactive')
        interaction_type = _require_str(payload, 'type', 'interactive')

        actions = payload.get('actions') or []
        if not isinstance(actions, list):
            raise NotHandledException(f'Invalid actions in interactive payload: {payload}')

        block_actions = tuple(BlockAction.from_payload(action) for action in actions)
        action_id = payload.get('callback_id') or ''
        if block_actions and block_actions[0].action_id:
            action_id = block_actions[0].action_id

        return cls(
            type=interaction_type,
            action_id=action_id,
            block_actions=block_actions,
        )
