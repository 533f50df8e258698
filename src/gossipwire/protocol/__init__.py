# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from .codec import EnvelopeCodec, decode, encode
from .content import ContactInfoContent, Content, ContentKind, Envelope, NetworkAddress, RegistryEventContent, UserContent, content_type
from .exceptions import DecodeError, EncodeError, GossipProtocolError
from .payloads import DEFAULT_PAYLOAD_SHAPES, ApplicationMessage, IdentityRegistryEvent, PayloadShapes, is_application_message, is_identity_registry_event
from .result import Err, Ok, Result
from .validation import content_kind, is_network_address, is_valid_content, is_valid_envelope, matches_kind

__all__ = (  # noqa: RUF022
    # Codec
    'EnvelopeCodec',
    'encode',
    'decode',

    # Data model
    'ContentKind',
    'NetworkAddress',
    'RegistryEventContent',
    'UserContent',
    'ContactInfoContent',
    'Content',
    'Envelope',
    'content_type',

    # Opaque payloads
    'IdentityRegistryEvent',
    'ApplicationMessage',
    'PayloadShapes',
    'DEFAULT_PAYLOAD_SHAPES',
    'is_identity_registry_event',
    'is_application_message',

    # Validation
    'content_kind',
    'matches_kind',
    'is_network_address',
    'is_valid_content',
    'is_valid_envelope',

    # Results and errors
    'Ok',
    'Err',
    'Result',
    'GossipProtocolError',
    'EncodeError',
    'DecodeError',
)
