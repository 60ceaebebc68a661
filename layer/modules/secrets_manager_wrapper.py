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
Wrapper module for AWS Secrets Manager operations.

The listener reads its Slack tokens through this wrapper when they are not
given directly in the environment. A secret holds either the token itself or
a JSON object with the token stored under a key.
'''

from __future__ import annotations

import json
from typing import Optional

import boto3


class SecretsManagerWrapper:  # pylint: disable=too-few-public-methods
    '''
    Wrapper around the boto3 Secrets Manager client for reading tokens.
    '''

    def __init__(self) -> None:
        self.client = boto3.client('secretsmanager')

    def get_secret(self, secret_id: str, key: Optional[str] = None) -> str:
        '''
        Get a secret value from Secrets Manager.

        Args:
            secret_id: ID or ARN of the secret to retrieve.
            key: Key to select when the secret is a JSON object.

        Returns:
            The secret value, or the value stored under ``key``.

        Raises:
            ClientError: If the secret cannot be retrieved from AWS.
            ValueError: If ``key`` is given and the secret is not a JSON object holding it.
        '''
        secret = self.client.get_secret_value(SecretId=secret_id)['SecretString']
        if key is None:
            return secret

        try:
            value = json.loads(secret)[key]
        except (ValueError, TypeError, KeyError) as e:
            raise ValueError(f'Secret {secret_id} has no key {key}') from e

        if not isinstance(value, str):
            raise ValueError(f'Secret {secret_id} key {key} is not a string')

        return value
