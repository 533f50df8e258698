# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from typing import Any

import pytest


def make_registry_event(**kw: Any) -> dict[str, Any]:
    return {
        'blockNumber': 1024,
        'blockHash': '0xb10c',
        'transactionHash': '0x7a5',
        'logIndex': 0,
        'fid': 7,
        'to': '0x00ff',
        'type': 'Register',
    } | kw


def make_application_message(**kw: Any) -> dict[str, Any]:
    return {
        'data': {'fid': 7, 'type': 1, 'timestamp': 1660000000, 'body': {'text': 'hello world'}},
        'hash': '0xha5h',
        'hashType': 'BLAKE2B_160',
        'signature': '0x5167',
        'signatureType': 'ED25519',
        'signer': '0x5163',
    } | kw


@pytest.fixture
def registry_event() -> dict[str, Any]:
    return make_registry_event()


@pytest.fixture
def application_message() -> dict[str, Any]:
    return make_application_message()
