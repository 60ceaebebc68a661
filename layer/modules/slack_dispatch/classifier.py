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
Envelope classifier module.

Determines the top-level kind of an inbound event and extracts its typed
payload. Classification never raises: a payload that does not match its
declared kind is logged and reported with ``ok=False``.
'''

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Dict, Type

from .exceptions import NotHandledException
from .models import (
    EnvelopeKind,
    EventsApiEnvelope,
    InboundEvent,
    InteractionCallback,
    SlashCommand,
)

logger = logging.getLogger()


@dataclass(frozen=True)
class Classification:
    '''
    Result of classifying an inbound event.

    Attributes:
        kind: The declared kind of the event.
        payload: The typed payload, or the raw payload when ``ok`` is False.
        ok: False when the declared kind does not match the carried payload.
    '''

    kind: EnvelopeKind
    payload: Any
    ok: bool


# Record type carried by each routable kind. OTHER carries nothing typed.
PAYLOAD_TYPES: Dict[EnvelopeKind, Type[Any]] = {
    EnvelopeKind.EVENTS_API: EventsApiEnvelope,
    EnvelopeKind.SLASH_COMMANDS: SlashCommand,
    EnvelopeKind.INTERACTIVE: InteractionCallback,
}


def classify(event: InboundEvent) -> Classification:
    '''
    Classify an inbound event and extract its typed payload.

    A payload that is already an instance of the kind's record type is
    returned as the same instance. A dictionary is parsed into the record
    type. Anything else is a mismatch.

    Args:
        event: The event pulled off the inbound stream.

    Returns:
        The classification. ``ok`` is False on a declared/actual mismatch.
    '''
    payload_type = PAYLOAD_TYPES.get(event.kind)
    if payload_type is None:
        return Classification(event.kind, event.payload, True)

    if isinstance(event.payload, payload_type):
        return Classification(event.kind, event.payload, True)

    if not isinstance(event.payload, dict):
        logger.error(
            f'Could not classify {event.kind.value} event carrying '
            f'{type(event.payload).__name__}: {event.payload}'
        )
        return Classification(event.kind, event.payload, False)

    try:
        typed_payload = payload_type.from_payload(event.payload)
    except NotHandledException as e:
        logger.error(f'Could not classify {event.kind.value} event: {e}')
        return Classification(event.kind, event.payload, False)

    return Classification(event.kind, typed_payload, True)
