# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

# Shape validation for gossip envelopes.
#
# The validators accept either the generic structures produced by parsing JSON
# (dicts, lists, strings and numbers) or the typed Envelope and content values
# from the content module. They never raise, they just answer if the value has
# the expected shape. The shapes are open, meaning that unknown fields are
# ignored rather than rejected. The topics are not checked against the known
# gossip topics, any non-empty list of strings is accepted.

from collections.abc import Callable, Mapping
from typing import Final

from .content import ContactInfoContent, ContentKind, Envelope, RegistryEventContent, UserContent
from .payloads import DEFAULT_PAYLOAD_SHAPES, PayloadShapes, is_integer, is_number, is_string

__all__ = 'content_kind', 'matches_kind', 'is_network_address', 'is_valid_content', 'is_valid_envelope'  # noqa: RUF022


type ShapeCheck = Callable[[object, PayloadShapes], bool]

_message_fields: Final[tuple[str, ...]] = ('message', 'root', 'count')


def is_network_address(value: object) -> bool:
    if not isinstance(value, Mapping):
        return False
    if not is_string(value.get('address')) or not is_integer(value.get('port')):
        return False
    return value.get('family') is None or is_string(value['family'])


def _is_contact_info(value: object, shapes: PayloadShapes) -> bool:  # noqa: ARG001
    if not isinstance(value, Mapping) or not is_string(value.get('peerId')):
        return False
    # contact info cannot carry any of the message content fields
    if any(name in value for name in _message_fields):
        return False
    return value.get('rpcAddress') is None or is_network_address(value['rpcAddress'])


def _has_trie_summary(value: Mapping) -> bool:
    return is_string(value.get('root')) and is_number(value.get('count'))


def _is_registry_event_content(value: object, shapes: PayloadShapes) -> bool:
    return isinstance(value, Mapping) and _has_trie_summary(value) and shapes.registry_event(value.get('message'))


def _is_user_content(value: object, shapes: PayloadShapes) -> bool:
    return isinstance(value, Mapping) and _has_trie_summary(value) and shapes.application_message(value.get('message'))


_shape_checks: Final[Mapping[ContentKind, ShapeCheck]] = {
    ContentKind.CONTACT_INFO: _is_contact_info,
    ContentKind.REGISTRY_EVENT: _is_registry_event_content,
    ContentKind.USER: _is_user_content,
}


def matches_kind(kind: ContentKind, value: object, *, shapes: PayloadShapes = DEFAULT_PAYLOAD_SHAPES) -> bool:
    """
    Check if some content matches the shape of the given kind.

    The content can be a typed content value, in which case its own kind must
    be the same as the requested kind, or the content's wire representation.
    """
    try:
        if isinstance(value, ContactInfoContent | RegistryEventContent | UserContent):
            if value.kind is not kind:
                return False
            value = value.to_json()
        return bool(_shape_checks[kind](value, shapes))
    except Exception:  # noqa: BLE001
        # validation never raises, whatever the payload predicates or the values do
        return False


def content_kind(value: object, *, shapes: PayloadShapes = DEFAULT_PAYLOAD_SHAPES) -> ContentKind | None:
    """Return the kind of the content described by value or None if it doesn't match exactly one kind"""
    match value:
        case ContactInfoContent() | RegistryEventContent() | UserContent():
            return value.kind if matches_kind(value.kind, value, shapes=shapes) else None
        case Mapping():
            # a wire value that matches more than one variant is ambiguous and has no kind
            kinds = [kind for kind in _shape_checks if matches_kind(kind, value, shapes=shapes)]
            return kinds[0] if len(kinds) == 1 else None
        case _:
            return None


def is_valid_content(value: object, *, shapes: PayloadShapes = DEFAULT_PAYLOAD_SHAPES) -> bool:
    return content_kind(value, shapes=shapes) is not None


def _is_topic_list(value: object) -> bool:
    return isinstance(value, list | tuple) and len(value) > 0 and all(is_string(topic) for topic in value)


def is_valid_envelope(value: object, *, shapes: PayloadShapes = DEFAULT_PAYLOAD_SHAPES) -> bool:
    match value:
        case Envelope(content=ContactInfoContent() | RegistryEventContent() | UserContent() as content, topics=topics):
            return _is_topic_list(topics) and is_valid_content(content, shapes=shapes)
        case Mapping():
            return _is_topic_list(value.get('topics')) and is_valid_content(value.get('content'), shapes=shapes)
        case _:
            return False
