# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
import logging
from typing import Any

import pytest

from gossipwire.configuration import GossipConfiguration
from gossipwire.protocol import (
    ContactInfoContent,
    DecodeError,
    EncodeError,
    Envelope,
    EnvelopeCodec,
    Err,
    NetworkAddress,
    Ok,
    PayloadShapes,
    RegistryEventContent,
    UserContent,
    decode,
    encode,
)
from gossipwire.topics import NETWORK_TOPIC_CONTACT, NETWORK_TOPIC_PRIMARY


class TestEncode:

    def test_contact_info(self) -> None:
        envelope = Envelope(content=ContactInfoContent(peer_id='peer-42'), topics=[NETWORK_TOPIC_CONTACT])
        result = encode(envelope)
        assert isinstance(result, Ok)
        assert json.loads(result.value.decode('utf-8')) == {'content': {'peerId': 'peer-42'}, 'topics': ['f_network_topic_contact']}

    def test_wire_field_names(self) -> None:
        address = NetworkAddress(address='192.0.2.1', port=2283, family='IPv4')
        envelope = Envelope(content=ContactInfoContent(peer_id='peer-42', rpc_address=address), topics=[NETWORK_TOPIC_CONTACT])
        data = encode(envelope).unwrap()
        assert json.loads(data) == {
            'content': {'peerId': 'peer-42', 'rpcAddress': {'address': '192.0.2.1', 'port': 2283, 'family': 'IPv4'}},
            'topics': ['f_network_topic_contact'],
        }

    def test_user_content(self, application_message: dict[str, Any]) -> None:
        envelope = Envelope(content=UserContent(message=application_message, root='0xabc', count=3), topics=[NETWORK_TOPIC_PRIMARY])
        data = encode(envelope).unwrap()
        assert json.loads(data) == {'content': {'message': application_message, 'root': '0xabc', 'count': 3}, 'topics': ['f_network_topic_primary']}

    def test_non_ascii_text_is_escaped(self, application_message: dict[str, Any]) -> None:
        message = application_message | {'data': application_message['data'] | {'body': {'text': 'héllo wörld ✓'}}}
        envelope = Envelope(content=UserContent(message=message, root='0xabc', count=3), topics=[NETWORK_TOPIC_PRIMARY])
        data = encode(envelope).unwrap()
        assert data.isascii()
        assert b'h\\u00e9llo w\\u00f6rld \\u2713' in data
        assert decode(data).unwrap() == envelope

    def test_lone_surrogates(self) -> None:
        envelope = Envelope(content=ContactInfoContent(peer_id='peer-\ud800'), topics=[NETWORK_TOPIC_CONTACT])
        data = encode(envelope).unwrap()
        assert data == b'{"content":{"peerId":"peer-\\ud800"},"topics":["f_network_topic_contact"]}'
        assert decode(data).unwrap() == envelope

    def test_empty_topics(self) -> None:
        result = encode(Envelope(content=ContactInfoContent(peer_id='peer-42'), topics=[]))
        assert isinstance(result, Err)
        assert isinstance(result.error, EncodeError)
        assert 'topics' in str(result.error)

    def test_content_matching_no_variant(self) -> None:
        result = encode(Envelope(content={}, topics=[NETWORK_TOPIC_PRIMARY]))  # type: ignore[arg-type]
        assert result.is_err()
        with pytest.raises(EncodeError, match=r'does not match any known content shape'):
            result.unwrap()

    def test_content_with_the_wrong_message(self, registry_event: dict[str, Any]) -> None:
        result = encode(Envelope(content=UserContent(message=registry_event, root='0xabc', count=3), topics=[NETWORK_TOPIC_PRIMARY]))
        assert isinstance(result.unwrap_err(), EncodeError)

    def test_not_an_envelope(self) -> None:
        result = encode({'content': {'peerId': 'peer-42'}, 'topics': [NETWORK_TOPIC_CONTACT]})  # type: ignore[arg-type]
        assert isinstance(result.unwrap_err(), EncodeError)

    def test_unserializable_message(self, application_message: dict[str, Any]) -> None:
        message = application_message | {'data': application_message['data'] | {'body': {'blob': b'\x00\x01'}}}
        result = encode(Envelope(content=UserContent(message=message, root='0xabc', count=3), topics=[NETWORK_TOPIC_PRIMARY]))
        assert isinstance(result.unwrap_err(), EncodeError)

    def test_non_finite_numbers(self, application_message: dict[str, Any]) -> None:
        message = application_message | {'data': application_message['data'] | {'body': {'score': float('inf')}}}
        result = encode(Envelope(content=UserContent(message=message, root='0xabc', count=3), topics=[NETWORK_TOPIC_PRIMARY]))
        assert isinstance(result.unwrap_err(), EncodeError)

    def test_encoding_is_deterministic(self, registry_event: dict[str, Any]) -> None:
        envelope = Envelope(content=RegistryEventContent(message=registry_event, root='0xabc', count=3), topics=[NETWORK_TOPIC_PRIMARY])
        assert encode(envelope).unwrap() == encode(envelope).unwrap()


class TestDecode:

    def test_contact_info(self) -> None:
        result = decode(b'{"content":{"peerId":"p1"},"topics":["f_network_topic_contact"]}')
        assert result == Ok(Envelope(content=ContactInfoContent(peer_id='p1'), topics=(NETWORK_TOPIC_CONTACT,)))

    def test_content_variants(self, registry_event: dict[str, Any], application_message: dict[str, Any]) -> None:
        data = json.dumps({'content': {'message': registry_event, 'root': '0xabc', 'count': 3}, 'topics': [NETWORK_TOPIC_PRIMARY]}).encode()
        envelope = decode(data).unwrap()
        assert isinstance(envelope.content, RegistryEventContent)
        assert envelope.content.message == registry_event

        data = json.dumps({'content': {'message': application_message, 'root': '0xabc', 'count': 3}, 'topics': [NETWORK_TOPIC_PRIMARY]}).encode()
        envelope = decode(data).unwrap()
        assert isinstance(envelope.content, UserContent)
        assert envelope.content.root == '0xabc'
        assert envelope.content.count == 3

        data = b'{"content":{"peerId":"p1","rpcAddress":{"address":"::1","port":2283,"family":"IPv6"}},"topics":["f_network_topic_contact"]}'
        envelope = decode(data).unwrap()
        assert isinstance(envelope.content, ContactInfoContent)
        assert envelope.content.rpc_address == NetworkAddress(address='::1', port=2283, family='IPv6')

    def test_extra_fields_are_dropped(self) -> None:
        envelope = decode(b'{"content":{"peerId":"p1","nickname":"bob"},"topics":["f_network_topic_contact"],"ttl":3}').unwrap()
        assert envelope == Envelope(content=ContactInfoContent(peer_id='p1'), topics=[NETWORK_TOPIC_CONTACT])

    def test_unknown_topics_are_accepted(self) -> None:
        envelope = decode(b'{"content":{"peerId":"p1"},"topics":["some_other_topic"]}').unwrap()
        assert envelope.topics == ('some_other_topic',)

    @pytest.mark.parametrize(
        'data',
        [
            pytest.param(b'not json', id='not json'),
            pytest.param(b'{"content":{"peerId":"p1"},"topics":["f_netw', id='truncated'),
            pytest.param(b'\xff\xfe\x00{', id='not utf-8'),
            pytest.param(b'', id='empty'),
            pytest.param(b'null', id='null'),
            pytest.param(b'{}', id='empty object'),
            pytest.param(b'0', id='zero'),
            pytest.param(b'[{"peerId":"p1"},["f_network_topic_contact"]]', id='array'),
            pytest.param(b'"envelope"', id='string'),
            pytest.param(b'{"topics":["f_network_topic_primary"]}', id='missing content'),
            pytest.param(b'{"content":{"peerId":"p1"},"topics":[]}', id='empty topics'),
            pytest.param(b'{"content":{"peerId":"p1"},"topics":"f_network_topic_contact"}', id='topics string'),
            pytest.param(b'{"content":{"peerId":1},"topics":["f_network_topic_contact"]}', id='wrong field type'),
            pytest.param(b'{"content":{},"topics":["f_network_topic_primary"]}', id='content matching no variant'),
            pytest.param(b'{"content":{"message":{},"root":"0xabc","count":NaN},"topics":["f_network_topic_primary"]}', id='NaN'),
            pytest.param(b'{"content":{"peerId":"p1","rpcAddress":{"address":"::1","port":Infinity}},"topics":["t"]}', id='Infinity'),
            pytest.param(100000 * b'[' + 100000 * b']', id='deeply nested'),
        ],
    )
    def test_invalid_data(self, data: bytes) -> None:
        result = decode(data)
        assert isinstance(result, Err)
        assert isinstance(result.error, DecodeError)

    def test_ambiguous_content(self, registry_event: dict[str, Any]) -> None:
        data = json.dumps({'content': {'peerId': 'p1', 'message': registry_event, 'root': '0xabc', 'count': 3}, 'topics': [NETWORK_TOPIC_PRIMARY]}).encode()
        result = decode(data)
        assert isinstance(result, Err)
        assert isinstance(result.error, DecodeError)

    def test_escaped_surrogates_survive_a_round_trip(self) -> None:
        envelope = decode(b'{"content":{"peerId":"\\ud800"},"topics":["t"]}').unwrap()
        assert envelope.content == ContactInfoContent(peer_id='\ud800')
        assert decode(encode(envelope).unwrap()).unwrap() == envelope

    def test_result_matching(self) -> None:
        match decode(b'not json'):
            case Ok(envelope):
                pytest.fail(f'Decoded an envelope from invalid data: {envelope!r}')
            case Err(error):
                assert isinstance(error, DecodeError)
        assert decode(b'not json').unwrap_or(None) is None
        with pytest.raises(ValueError, match=r'unwrap_err\(\) on an Ok result'):
            decode(b'{"content":{"peerId":"p1"},"topics":["t"]}').unwrap_err()

    def test_invalid_data_type(self) -> None:
        result = decode('{"content":{"peerId":"p1"},"topics":["f_network_topic_contact"]}')  # type: ignore[arg-type]
        assert isinstance(result.unwrap_err(), DecodeError)

    def test_buffer_types(self) -> None:
        data = b'{"content":{"peerId":"p1"},"topics":["f_network_topic_contact"]}'
        expected = Envelope(content=ContactInfoContent(peer_id='p1'), topics=[NETWORK_TOPIC_CONTACT])
        assert decode(bytearray(data)).unwrap() == expected
        assert decode(memoryview(data)).unwrap() == expected

    def test_rejections_are_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger='gossipwire.protocol.codec'):
            decode(b'not json')
        assert 'Discarding gossip data' in caplog.text


class TestRoundTrip:

    def test_round_trip(self, registry_event: dict[str, Any], application_message: dict[str, Any]) -> None:
        envelopes = [
            Envelope(content=ContactInfoContent(peer_id='peer-42'), topics=[NETWORK_TOPIC_CONTACT]),
            Envelope(content=ContactInfoContent(peer_id='peer-42', rpc_address=NetworkAddress(address='192.0.2.1', port=2283)), topics=[NETWORK_TOPIC_CONTACT]),
            Envelope(content=RegistryEventContent(message=registry_event, root='0xabc', count=3), topics=[NETWORK_TOPIC_PRIMARY]),
            Envelope(content=UserContent(message=application_message, root='0xdef', count=2.5), topics=[NETWORK_TOPIC_PRIMARY, NETWORK_TOPIC_CONTACT]),
        ]
        for envelope in envelopes:
            assert decode(encode(envelope).unwrap()).unwrap() == envelope


class TestEnvelopeCodec:

    def test_message_size_limit(self) -> None:
        codec = EnvelopeCodec(GossipConfiguration(max_message_size=128))
        small = Envelope(content=ContactInfoContent(peer_id='p1'), topics=[NETWORK_TOPIC_CONTACT])
        large = Envelope(content=ContactInfoContent(peer_id=100 * 'p'), topics=[NETWORK_TOPIC_CONTACT])
        assert codec.decode(codec.encode(small).unwrap()).unwrap() == small
        assert isinstance(codec.encode(large).unwrap_err(), EncodeError)
        assert isinstance(codec.decode(encode(large).unwrap()).unwrap_err(), DecodeError)

    def test_message_size_limit_counts_bytes(self) -> None:
        data = b'{"content":{"peerId":"p1"},"topics":["f_network_topic_contact"]}'
        data = data.ljust(-(-len(data) // 4) * 4)
        view = memoryview(data).cast('I')
        assert len(view) < 32 < len(data)
        codec = EnvelopeCodec(GossipConfiguration(max_message_size=32))
        assert isinstance(codec.decode(view).unwrap_err(), DecodeError)
        assert isinstance(codec.decode(bytearray(data)).unwrap_err(), DecodeError)

    def test_custom_payload_shapes(self) -> None:
        codec = EnvelopeCodec(shapes=PayloadShapes(application_message=lambda value: isinstance(value, str)))
        envelope = Envelope(content=UserContent(message='hello', root='0xabc', count=1), topics=[NETWORK_TOPIC_PRIMARY])  # type: ignore[arg-type]
        assert codec.decode(codec.encode(envelope).unwrap()).unwrap() == envelope
        assert encode(envelope).is_err()
