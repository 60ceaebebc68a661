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
Configuration module for event dispatch settings.

This module loads configuration from either a JSON file or environment variables,
providing fallback behavior for different deployment environments. The configuration
includes reply colors, the greeting token and the sizing of the dispatch worker pool.

Configuration Keys:
    greeting_token: Token that selects the greeting reply to a mention (e.g., 'hello')
    greeting_color: Attachment color of the greeting reply
    generic_color: Attachment color of the generic reply
    hello_color: Attachment color of the /hello reply
    worker_count: Maximum number of events processed concurrently
    queue_maxsize: Maximum number of inbound events buffered; envelopes arriving
        while the stream is full are acknowledged and dropped
    handler_timeout_seconds: Upper bound on a single handler invocation, kept
        below the 3 second Socket Mode acknowledgment window
    shutdown_timeout_seconds: Grace period for in-flight events on shutdown
    log_level: Logging level of the listener process

Loading Strategy:
    1. Attempts to load from config.json in the same directory
    2. Falls back to environment variables if JSON file fails
    3. Logs error if JSON loading fails but continues with env vars

Environment Variables (fallback):
    GREETING_TOKEN, GREETING_COLOR, GENERIC_COLOR, HELLO_COLOR, WORKER_COUNT,
    QUEUE_MAXSIZE, HANDLER_TIMEOUT_SECONDS, SHUTDOWN_TIMEOUT_SECONDS, LOG_LEVEL

Usage:
    >>> from slack_dispatch.config import CONFIG
    >>> CONFIG['greeting_token']
    'hello'

Attributes:
    CONFIG_FILE: Path to the config.json file
    CONFIG: Dictionary containing all configuration values
'''

from pathlib import Path
import json
import logging
import os

CONFIG_FILE = Path(Path(__file__).parent, 'config.json')
logger = logging.getLogger()

try:
    # Attempt to load configuration from JSON file
    with CONFIG_FILE.open(encoding='utf-8') as config_file:
        CONFIG = json.load(config_file)
except Exception as e:  # pylint: disable=broad-exception-caught
    # Fallback to environment variables if JSON file is missing or invalid
    logger.error(f'Error loading config file: {CONFIG_FILE}: {e}')
    CONFIG = {
        'greeting_token': os.getenv('GREETING_TOKEN', 'hello'),
        'greeting_color': os.getenv('GREETING_COLOR', '#4ad030'),
        'generic_color': os.getenv('GENERIC_COLOR', '#3d3d3d'),
        'hello_color': os.getenv('HELLO_COLOR', '#4af030'),
        'worker_count': int(os.getenv('WORKER_COUNT', '4')),
        'queue_maxsize': int(os.getenv('QUEUE_MAXSIZE', '100')),
        'handler_timeout_seconds': float(os.getenv('HANDLER_TIMEOUT_SECONDS', '2.5')),
        'shutdown_timeout_seconds': float(os.getenv('SHUTDOWN_TIMEOUT_SECONDS', '5')),
        'log_level': os.getenv('LOG_LEVEL', 'INFO'),
    }
