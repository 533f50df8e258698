# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Gossip envelope encoding.

   Envelopes are transmitted as the UTF-8 encoding of their JSON
   representation. Encoding refuses to serialize envelopes that do not have
   a valid shape and decoding refuses to return anything that doesn't have
   a valid shape, so the codec is the point where data received from peers
   becomes trusted in-process data.

   Neither operation raises. Both return either Ok with the result or Err
   with an EncodeError/DecodeError describing what went wrong.

"""

import json
import logging
from typing import Final, NoReturn

from gossipwire.configuration import DEFAULT_CONFIGURATION, GossipConfiguration

from .content import Envelope
from .exceptions import DecodeError, EncodeError
from .payloads import DEFAULT_PAYLOAD_SHAPES, PayloadShapes
from .result import Err, Ok, Result
from .validation import content_kind, is_valid_envelope

__all__ = 'EnvelopeCodec', 'encode', 'decode'


log = logging.getLogger(__name__)

TEXT_ENCODING: Final[str] = 'utf-8'


def _reject_constant(name: str) -> NoReturn:
    # NaN, Infinity and -Infinity are accepted by the json module, but they are not JSON
    raise ValueError(f'Invalid JSON constant: {name}')


class EnvelopeCodec:
    """Converts envelopes to and from their wire representation"""

    def __init__(self, configuration: GossipConfiguration = DEFAULT_CONFIGURATION, *, shapes: PayloadShapes = DEFAULT_PAYLOAD_SHAPES) -> None:
        self.configuration = configuration
        self.shapes = shapes

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(configuration={self.configuration!r}, shapes={self.shapes!r})'

    def encode(self, envelope: Envelope) -> Result[bytes, EncodeError]:
        if not isinstance(envelope, Envelope):
            return Err(EncodeError(f'Expected an Envelope, got {envelope.__class__.__qualname__}'))
        if not is_valid_envelope(envelope, shapes=self.shapes):
            return Err(EncodeError(self._describe_invalid(envelope)))
        try:
            data = json.dumps(envelope.to_json(), separators=(',', ':'), allow_nan=False).encode(TEXT_ENCODING)
        except (TypeError, ValueError, RecursionError) as exc:
            return Err(EncodeError(f'Cannot serialize the envelope: {exc}'))
        max_size = self.configuration.max_message_size
        if max_size is not None and len(data) > max_size:
            return Err(EncodeError(f'The encoded envelope is too large: {len(data)} > {max_size} bytes'))
        return Ok(data)

    def decode(self, data: bytes | bytearray | memoryview) -> Result[Envelope, DecodeError]:
        result = self._decode(data)
        if isinstance(result, Err):
            log.debug('Discarding gossip data: %s', result.error)
        return result

    def _decode(self, data: bytes | bytearray | memoryview) -> Result[Envelope, DecodeError]:
        if not isinstance(data, bytes | bytearray | memoryview):
            return Err(DecodeError(f'Expected bytes, got {data.__class__.__qualname__}'))
        max_size = self.configuration.max_message_size
        size = memoryview(data).nbytes
        if max_size is not None and size > max_size:
            return Err(DecodeError(f'The data is too large: {size} > {max_size} bytes'))
        try:
            value = json.loads(bytes(data).decode(TEXT_ENCODING), parse_constant=_reject_constant)
        except (UnicodeDecodeError, ValueError, RecursionError) as exc:  # json.JSONDecodeError is a ValueError
            return Err(DecodeError(f'Failed to decode the gossip envelope: {exc}'))
        if not value or not is_valid_envelope(value, shapes=self.shapes):
            return Err(DecodeError('Failed to decode the gossip envelope: invalid envelope structure'))
        kind = content_kind(value['content'], shapes=self.shapes)
        assert kind is not None  # noqa: S101 (used by type checkers)
        return Ok(Envelope.from_json(value, kind=kind))

    def _describe_invalid(self, envelope: Envelope) -> str:
        topics = envelope.topics
        if not isinstance(topics, list | tuple) or not topics:
            return f'Invalid envelope: topics must be a non-empty sequence of strings, got {topics!r}'
        if not all(isinstance(topic, str) for topic in topics):
            return f'Invalid envelope: all topics must be strings, got {topics!r}'
        return f'Invalid envelope: the content does not match any known content shape: {envelope.content!r}'


_default_codec: Final[EnvelopeCodec] = EnvelopeCodec()


def encode(envelope: Envelope) -> Result[bytes, EncodeError]:
    """Encode an envelope as UTF-8 encoded JSON that can be broadcast over the gossip network"""
    return _default_codec.encode(envelope)


def decode(data: bytes | bytearray | memoryview) -> Result[Envelope, DecodeError]:
    """Decode an envelope from UTF-8 encoded JSON received from the gossip network"""
    return _default_codec.decode(data)
