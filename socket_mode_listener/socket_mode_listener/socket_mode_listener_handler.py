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
Socket Mode listener entry point.

This module wires the Slack clients, the Socket Mode bridge and the dispatch
loop together and runs them until the process receives SIGINT or SIGTERM.

Environment Variables:
    SLACK_BOT_TOKEN / SLACK_APP_TOKEN: Tokens given directly.
    SLACK_BOT_TOKEN_ID / SLACK_APP_TOKEN_ID: Secrets Manager secret ids holding
        the tokens, used when the tokens are not given directly.
    SLACK_BOT_TOKEN_KEY / SLACK_APP_TOKEN_KEY: Optional key selecting the token
        in a JSON secret.
'''

from __future__ import annotations

import asyncio
import logging
import os
import signal
from typing import Callable, Optional

import aiohttp
from slack_sdk.socket_mode.aiohttp import SocketModeClient
from tenacity import (
    retry,
    stop_after_attempt,
    wait_fixed,
    retry_if_exception_type,
    before_sleep_log,
)

from slack_dispatch import AcknowledgmentCoordinator, Dispatcher, InboundEvent
from slack_dispatch.config import CONFIG

from secrets_manager_wrapper import SecretsManagerWrapper
from slack_sdk_wrapper import SlackSdkWrapper

from .socket_mode_bridge import SocketModeBridge


logger = logging.getLogger()

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def resolve_token(
    name: str,
    secrets_manager_factory: Callable[[], SecretsManagerWrapper] = SecretsManagerWrapper,
) -> str:
    '''
    Resolve a Slack token from the environment or from Secrets Manager.

    Args:
        name: Environment variable holding the token, e.g. 'SLACK_BOT_TOKEN'.
              '<name>_ID' and '<name>_KEY' name the secret fallback.
        secrets_manager_factory: Builds the Secrets Manager wrapper on demand.

    Returns:
        The token.

    Raises:
        ValueError: If neither the token nor a secret id is configured.
    '''
    token = os.getenv(name)
    if token:
        return token

    secret_id = os.getenv(f'{name}_ID')
    if not secret_id:
        raise ValueError(f'Neither {name} nor {name}_ID is set')

    logger.info(f'Reading {name} from secret {secret_id}')
    return secrets_manager_factory().get_secret(secret_id, os.getenv(f'{name}_KEY') or None)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_fixed(1),
    retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def connect(socket_mode_client: SocketModeClient) -> None:
    await socket_mode_client.connect()
    logger.info('Socket Mode connection established')


async def serve(
    bot_token: str,
    app_token: str,
    cancel_event: Optional[asyncio.Event] = None,
) -> None:
    '''
    Run the bot until the cancellation signal is raised.

    Args:
        bot_token: Slack bot token (xoxb-) used for Web API calls.
        app_token: Slack app-level token (xapp-) used for the socket.
        cancel_event: Cancellation signal. SIGINT and SIGTERM raise it.
    '''
    cancel_event = cancel_event or asyncio.Event()

    slack_sdk_wrapper = SlackSdkWrapper(bot_token)
    socket_mode_client = SocketModeClient(
        app_token=app_token,
        web_client=slack_sdk_wrapper.client,
        logger=logging.getLogger('socket_mode'),
    )

    stream: asyncio.Queue[InboundEvent] = asyncio.Queue(maxsize=CONFIG['queue_maxsize'])
    bridge = SocketModeBridge(socket_mode_client, stream)
    socket_mode_client.socket_mode_request_listeners.append(bridge.enqueue)

    dispatcher = Dispatcher(slack_sdk_wrapper, AcknowledgmentCoordinator(bridge.ack))

    loop = asyncio.get_running_loop()
    for signum in SHUTDOWN_SIGNALS:
        loop.add_signal_handler(signum, cancel_event.set)

    try:
        await connect(socket_mode_client)
        await dispatcher.run(stream, cancel_event)
    finally:
        await socket_mode_client.close()
        logger.info('Socket Mode connection closed')

        for signum in SHUTDOWN_SIGNALS:
            loop.remove_signal_handler(signum)


def main() -> None:
    '''
    Console entry point.
    '''
    logging.basicConfig(
        level=CONFIG['log_level'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    bot_token = resolve_token('SLACK_BOT_TOKEN')
    app_token = resolve_token('SLACK_APP_TOKEN')

    asyncio.run(serve(bot_token, app_token))


if __name__ == '__main__':
    main()
