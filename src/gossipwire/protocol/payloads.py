# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

# The identity registry events and the application messages are defined by
# the subsystems that produce and consume them. The gossip layer only routes
# them, so it treats them as opaque JSON objects and only needs to be able to
# tell them apart. The predicates below describe the minimal shape of each,
# and can be replaced through PayloadShapes when the owning subsystem wants
# a stricter (or a different) check.

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from math import isfinite
from typing import Any, Final

__all__ = (  # noqa: RUF022
    'IdentityRegistryEvent',
    'ApplicationMessage',
    'ShapePredicate',
    'PayloadShapes',
    'DEFAULT_PAYLOAD_SHAPES',

    'is_identity_registry_event',
    'is_application_message',

    'is_integer',
    'is_number',
    'is_string',
)


type IdentityRegistryEvent = Mapping[str, Any]
type ApplicationMessage = Mapping[str, Any]

type ShapePredicate = Callable[[object], bool]


REGISTRY_EVENT_TYPES: Final[frozenset[str]] = frozenset({'Register', 'Transfer'})


# Primitive JSON type checks. A bool is an int subclass in python, but it is
# a distinct type in JSON and must not pass for a number.

def is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: object) -> bool:
    match value:
        case bool():
            return False
        case int():
            return True
        case float():
            return isfinite(value)
        case _:
            return False


def is_string(value: object) -> bool:
    return isinstance(value, str)


def _has_fields(value: object, fields: Mapping[str, ShapePredicate]) -> bool:
    if not isinstance(value, Mapping):
        return False
    return all(name in value and check(value[name]) for name, check in fields.items())


_registry_event_fields: Final[Mapping[str, ShapePredicate]] = {
    'blockNumber': is_integer,
    'blockHash': is_string,
    'transactionHash': is_string,
    'logIndex': is_integer,
    'fid': is_integer,
    'to': is_string,
    'type': lambda value: isinstance(value, str) and value in REGISTRY_EVENT_TYPES,
}

_message_data_fields: Final[Mapping[str, ShapePredicate]] = {
    'fid': is_integer,
    'type': is_integer,
    'timestamp': is_integer,
    'body': lambda value: isinstance(value, Mapping),
}

_message_fields: Final[Mapping[str, ShapePredicate]] = {
    'data': lambda value: _has_fields(value, _message_data_fields),
    'hash': is_string,
    'hashType': is_string,
    'signature': is_string,
    'signatureType': is_string,
    'signer': is_string,
}


def is_identity_registry_event(value: object) -> bool:
    """Check if value has the shape of an identity registry event"""
    return _has_fields(value, _registry_event_fields)


def is_application_message(value: object) -> bool:
    """Check if value has the shape of a signed application message"""
    return _has_fields(value, _message_fields)


@dataclass(frozen=True, slots=True, kw_only=True)
class PayloadShapes:
    """The shape predicates used to recognize the opaque message payloads"""

    registry_event: ShapePredicate = is_identity_registry_event
    application_message: ShapePredicate = is_application_message


DEFAULT_PAYLOAD_SHAPES: Final[PayloadShapes] = PayloadShapes()
