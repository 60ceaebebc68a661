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
Custom exceptions for event dispatch in the Slack bot.

None of these exceptions terminate the dispatch loop. They exist so the loop
can tell apart the reasons an event was dropped when it logs them.
'''


class NotHandledException(Exception):
    '''
    Exception raised when a payload cannot be turned into a typed record.

    Raised by the record parsers when a required field is missing or has the
    wrong type. For example:
    - Slash command payload without a 'command' field
    - App mention event without a 'channel' field

    The classifier treats this as a transport-level inconsistency and skips
    the event. The event is still acknowledged so Slack does not resend it.

    Example:
        >>> if 'command' not in payload:
        ...     raise NotHandledException('Missing command in slash command payload')
    '''


class UnsupportedEventType(Exception):
    '''
    Exception raised for an Events API envelope that is not an event callback.

    Only 'event_callback' envelopes carry an inner event the bot can route.
    Any other envelope type (e.g. 'app_rate_limited') is reported with this
    exception. The dispatch loop logs it, acknowledges the event and moves on.
    '''


class AlreadyAcknowledged(Exception):
    '''
    Exception raised when an acknowledgment token is consumed a second time.

    Every Socket Mode envelope must be acknowledged exactly once. The
    acknowledgment coordinator refuses a second acknowledgment and logs it.
    '''
