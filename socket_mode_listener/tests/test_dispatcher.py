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

# pylint: disable=missing-class-docstring, missing-function-docstring, unused-argument, missing-module-docstring, protected-access, redefined-outer-name
# mypy: disable-error-code=no-untyped-def

import asyncio
from collections import Counter
import os
from typing import Any, List
from unittest.mock import AsyncMock, patch

import pytest
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

os.environ['GREETING_TOKEN'] = 'hello'
os.environ['WORKER_COUNT'] = '1'

# pylint:disable=wrong-import-position
from slack_sdk_wrapper import SlackSdkWrapper

from slack_dispatch import (
    AckToken,
    AcknowledgmentCoordinator,
    Dispatcher,
    DispatcherState,
    EnvelopeKind,
    InboundEvent,
    SlashCommandRouter,
)


CHANNEL_ID = 'C1234567890'
FAILING_USER_ID = 'UFAIL'


def users_info(user: str) -> dict:
    if user == FAILING_USER_ID:
        raise SlackApiError('user_not_found', {'ok': False, 'error': 'user_not_found'})
    return {'ok': True, 'user': {'name': 'alice'}}


@pytest.fixture
def slack_sdk_wrapper():
    slack_sdk_wrapper = SlackSdkWrapper()
    slack_sdk_wrapper.client = AsyncMock(spec=AsyncWebClient)
    slack_sdk_wrapper.client.users_info.side_effect = users_info
    slack_sdk_wrapper.client.chat_postMessage.return_value = {'ok': True}
    return slack_sdk_wrapper


@pytest.fixture
def ack_sender():
    return AsyncMock()


@pytest.fixture
def dispatcher_factory(slack_sdk_wrapper, ack_sender):
    def factory(**kwargs: Any) -> Dispatcher:
        kwargs.setdefault('worker_count', 1)
        kwargs.setdefault('handler_timeout_seconds', 1)
        kwargs.setdefault('shutdown_timeout_seconds', 1)
        return Dispatcher(slack_sdk_wrapper, AcknowledgmentCoordinator(ack_sender), **kwargs)

    return factory


def make_event(envelope_id: str, kind: EnvelopeKind, payload: Any) -> InboundEvent:
    return InboundEvent(kind=kind, payload=payload, ack_token=AckToken(envelope_id))


def mention(envelope_id: str, user: str = 'U1234567890', text: str = 'hello') -> InboundEvent:
    return make_event(
        envelope_id,
        EnvelopeKind.EVENTS_API,
        {
            'type': 'event_callback',
            'event': {'type': 'app_mention', 'user': user, 'channel': CHANNEL_ID, 'text': text},
        },
    )


def slash(envelope_id: str, command: str, text: str = '') -> InboundEvent:
    return make_event(
        envelope_id,
        EnvelopeKind.SLASH_COMMANDS,
        {'command': command, 'channel_id': CHANNEL_ID, 'user_name': 'alice', 'text': text},
    )


def acked(ack_sender: AsyncMock) -> dict:
    return {call.args[0].envelope_id: call.args[1] for call in ack_sender.await_args_list}


async def run_until_drained(dispatcher: Dispatcher, events: List[InboundEvent]) -> None:
    stream: asyncio.Queue = asyncio.Queue()
    for event in events:
        stream.put_nowait(event)

    cancel_event = asyncio.Event()
    task = asyncio.create_task(dispatcher.run(stream, cancel_event))

    await asyncio.wait_for(stream.join(), timeout=5)
    cancel_event.set()
    await asyncio.wait_for(task, timeout=5)


MIXED_STREAM = [
    mention('mention'),
    mention('mention_generic', text="what's up"),
    mention('mention_lookup_failure', user=FAILING_USER_ID),
    slash('hello', '/hello', 'world'),
    slash('poll', '/mom-gay'),
    slash('unknown', '/unknown'),
    make_event(
        'interaction',
        EnvelopeKind.INTERACTIVE,
        {'type': 'block_actions', 'actions': [{'action_id': 'answer', 'selected_options': []}]},
    ),
    make_event('unsupported', EnvelopeKind.EVENTS_API, {'type': 'app_rate_limited'}),
    make_event('ignored_inner', EnvelopeKind.EVENTS_API, {
        'type': 'event_callback',
        'event': {'type': 'reaction_added', 'reaction': 'thumbsup'},
    }),
    make_event('mismatch', EnvelopeKind.SLASH_COMMANDS, 'not a command'),
    make_event('malformed', EnvelopeKind.SLASH_COMMANDS, {'text': 'no command'}),
    make_event('other', EnvelopeKind.OTHER, {'type': 'hello'}),
]


@pytest.mark.asyncio
@pytest.mark.parametrize('worker_count', [1, 4])
async def test_every_event_acknowledged_exactly_once(dispatcher_factory, ack_sender, worker_count):
    # Fresh tokens for every parametrized run
    events = [
        make_event(event.ack_token.envelope_id, event.kind, event.payload)
        for event in MIXED_STREAM
    ]
    dispatcher = dispatcher_factory(worker_count=worker_count)

    await run_until_drained(dispatcher, events)

    counts = Counter(call.args[0].envelope_id for call in ack_sender.await_args_list)
    assert ack_sender.await_count == len(events)
    assert counts == Counter(event.ack_token.envelope_id for event in events)
    assert all(event.ack_token.consumed for event in events)
    assert dispatcher.state is DispatcherState.SHUTTING_DOWN


@pytest.mark.asyncio
async def test_only_slash_command_payloads_ride_on_ack(dispatcher_factory, ack_sender, slack_sdk_wrapper):
    await run_until_drained(
        dispatcher_factory(),
        [mention('mention'), slash('hello', '/hello', 'world'), slash('poll', '/mom-gay')],
    )

    payloads = acked(ack_sender)
    assert payloads['mention'] is None
    assert payloads['hello'] is None
    assert payloads['poll'] is not None
    assert payloads['poll']['attachments']

    # The mention and /hello replies went through the send path
    assert slack_sdk_wrapper.client.chat_postMessage.await_count == 2


@pytest.mark.asyncio
async def test_handler_error_does_not_stop_the_loop(dispatcher_factory, ack_sender, slack_sdk_wrapper):
    slack_sdk_wrapper.client.chat_postMessage.side_effect = [
        SlackApiError('channel_not_found', {'ok': False, 'error': 'channel_not_found'}),
        {'ok': True},
    ]

    await run_until_drained(
        dispatcher_factory(),
        [slash('first', '/hello', 'one'), slash('second', '/hello', 'two')],
    )

    assert list(acked(ack_sender)) == ['first', 'second']
    assert slack_sdk_wrapper.client.chat_postMessage.await_count == 2


@pytest.mark.asyncio
async def test_single_worker_keeps_arrival_order(dispatcher_factory, ack_sender):
    handled: List[str] = []

    async def record(command, slack_sdk_wrapper):
        # Earlier commands sleep longer, so any overlap would reorder them.
        await asyncio.sleep(0.01 * (5 - int(command.text)))
        handled.append(command.text)

    with patch.dict(SlashCommandRouter.commands, {'/record': record}):
        await run_until_drained(
            dispatcher_factory(worker_count=1),
            [slash(f'e{i}', '/record', str(i)) for i in range(5)],
        )

    assert handled == ['0', '1', '2', '3', '4']
    assert list(acked(ack_sender)) == ['e0', 'e1', 'e2', 'e3', 'e4']


@pytest.mark.asyncio
async def test_slow_handler_does_not_delay_other_acks(dispatcher_factory, ack_sender):
    release = asyncio.Event()

    async def block(command, slack_sdk_wrapper):
        await release.wait()

    async def fast(command, slack_sdk_wrapper):
        return None

    stream: asyncio.Queue = asyncio.Queue()
    stream.put_nowait(slash('slow', '/block'))
    stream.put_nowait(slash('fast', '/fast'))
    cancel_event = asyncio.Event()

    with patch.dict(SlashCommandRouter.commands, {'/block': block, '/fast': fast}):
        task = asyncio.create_task(dispatcher_factory(worker_count=2).run(stream, cancel_event))

        for _ in range(100):
            if 'fast' in acked(ack_sender):
                break
            await asyncio.sleep(0.01)

        assert list(acked(ack_sender)) == ['fast']

        release.set()
        await asyncio.wait_for(stream.join(), timeout=5)
        cancel_event.set()
        await asyncio.wait_for(task, timeout=5)

    assert list(acked(ack_sender)) == ['fast', 'slow']


@pytest.mark.asyncio
async def test_handler_timeout_still_acknowledges(dispatcher_factory, ack_sender):
    async def hang(command, slack_sdk_wrapper):
        await asyncio.sleep(60)

    with patch.dict(SlashCommandRouter.commands, {'/hang': hang}):
        await run_until_drained(
            dispatcher_factory(handler_timeout_seconds=0.05),
            [slash('hang', '/hang'), slash('hello', '/hello', 'world')],
        )

    assert acked(ack_sender) == {'hang': None, 'hello': None}


@pytest.mark.asyncio
async def test_cancelled_before_start_pulls_nothing(dispatcher_factory, ack_sender):
    stream: asyncio.Queue = asyncio.Queue()
    for i in range(3):
        stream.put_nowait(slash(f'e{i}', '/hello', 'world'))

    cancel_event = asyncio.Event()
    cancel_event.set()
    dispatcher = dispatcher_factory()

    await asyncio.wait_for(dispatcher.run(stream, cancel_event), timeout=1)

    assert stream.qsize() == 3
    ack_sender.assert_not_awaited()
    assert dispatcher.state is DispatcherState.SHUTTING_DOWN


@pytest.mark.asyncio
async def test_cancellation_while_idle_terminates(dispatcher_factory, ack_sender):
    stream: asyncio.Queue = asyncio.Queue()
    cancel_event = asyncio.Event()
    dispatcher = dispatcher_factory()

    task = asyncio.create_task(dispatcher.run(stream, cancel_event))
    await asyncio.sleep(0.01)
    assert dispatcher.state is DispatcherState.RUNNING

    cancel_event.set()
    await asyncio.wait_for(task, timeout=1)

    stream.put_nowait(slash('late', '/hello', 'world'))
    await asyncio.sleep(0.01)

    assert stream.qsize() == 1
    ack_sender.assert_not_awaited()
    assert dispatcher.state is DispatcherState.SHUTTING_DOWN


@pytest.mark.asyncio
async def test_cancellation_with_full_pool_terminates(dispatcher_factory, ack_sender):
    async def hang(command, slack_sdk_wrapper):
        await asyncio.sleep(60)

    stream: asyncio.Queue = asyncio.Queue()
    stream.put_nowait(slash('in_flight', '/hang'))
    stream.put_nowait(slash('queued', '/hang'))
    cancel_event = asyncio.Event()

    with patch.dict(SlashCommandRouter.commands, {'/hang': hang}):
        dispatcher = dispatcher_factory(
            worker_count=1,
            handler_timeout_seconds=120,
            shutdown_timeout_seconds=0.05,
        )
        task = asyncio.create_task(dispatcher.run(stream, cancel_event))
        await asyncio.sleep(0.05)

        cancel_event.set()
        await asyncio.wait_for(task, timeout=1)

    # The in-flight event was cancelled at shutdown but still acknowledged once
    assert acked(ack_sender) == {'in_flight': None}
    assert stream.qsize() == 1


@pytest.mark.asyncio
async def test_ack_transport_failure_is_contained(slack_sdk_wrapper):
    ack_sender = AsyncMock(side_effect=ConnectionError('socket closed'))
    dispatcher = Dispatcher(
        slack_sdk_wrapper,
        AcknowledgmentCoordinator(ack_sender),
        worker_count=1,
        handler_timeout_seconds=1,
        shutdown_timeout_seconds=1,
    )

    await run_until_drained(dispatcher, [slash('a', '/unknown'), slash('b', '/unknown')])

    assert ack_sender.await_count == 2


@pytest.mark.asyncio
async def test_acknowledgment_coordinator_refuses_duplicates(ack_sender):
    coordinator = AcknowledgmentCoordinator(ack_sender)
    token = AckToken('envelope')

    assert await coordinator.acknowledge(token, {'text': 'reply'}) is True
    assert await coordinator.acknowledge(token) is False
    assert await coordinator.acknowledge(None) is False

    ack_sender.assert_awaited_once_with(token, {'text': 'reply'})
    assert token.consumed


@pytest.mark.asyncio
async def test_default_timeout_acknowledges_within_socket_mode_window(slack_sdk_wrapper, ack_sender):
    async def stalled_users_info(user: str) -> dict:
        await asyncio.sleep(3.5)
        return users_info(user)

    slack_sdk_wrapper.client.users_info.side_effect = stalled_users_info
    dispatcher = Dispatcher(slack_sdk_wrapper, AcknowledgmentCoordinator(ack_sender))

    loop = asyncio.get_running_loop()
    started = loop.time()
    await dispatcher.process(mention('stalled'))
    latency = loop.time() - started

    # Slack redelivers envelopes that are not acknowledged within 3 seconds
    assert dispatcher.handler_timeout_seconds < 3
    assert latency < 3
    assert acked(ack_sender) == {'stalled': None}
    slack_sdk_wrapper.client.chat_postMessage.assert_not_awaited()
