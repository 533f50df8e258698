# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Gossip envelope data model.

   An envelope pairs the content that is broadcast over the gossip network
   with the topics it is published under:

     { "content": <Content>, "topics": [<string>, ...] }

   The content is one of three variants:

     { "message": <RegistryEvent>, "root": <string>, "count": <number> }
     { "message": <ApplicationMessage>, "root": <string>, "count": <number> }
     { "peerId": <string>, "rpcAddress"?: <NetworkAddress> }

   The first two carry a payload together with the publisher's current merkle
   trie root and the number of items under that root. The last one is a node
   announcing itself and, optionally, the address where it serves RPC
   requests.

   On the wire the variants are told apart by their shape. In memory every
   variant is its own type which carries a discriminating kind, so code that
   consumes decoded envelopes can dispatch on the type (or on the kind)
   without having to inspect the fields again.

"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Any, ClassVar, Self

from .payloads import ApplicationMessage, IdentityRegistryEvent

__all__ = (  # noqa: RUF022
    'ContentKind',
    'NetworkAddress',

    'RegistryEventContent',
    'UserContent',
    'ContactInfoContent',
    'Content',
    'content_type',

    'Envelope',
)


type JSONObject = dict[str, Any]


class ContentKind(StrEnum):
    REGISTRY_EVENT = 'registry-event'
    USER = 'user'
    CONTACT_INFO = 'contact-info'

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}.{self.name}'


@dataclass(frozen=True, slots=True, kw_only=True)
class NetworkAddress:
    address: str
    port: int
    family: str | None = None  # 'IPv4' or 'IPv6'

    @classmethod
    def from_json(cls, value: Mapping[str, Any]) -> Self:
        return cls(address=value['address'], port=value['port'], family=value.get('family'))

    def to_json(self) -> JSONObject:
        data: JSONObject = {'address': self.address, 'port': self.port}
        if self.family is not None:
            data['family'] = self.family
        return data

    @property
    def ip_address(self) -> IPv4Address | IPv6Address:
        """The address as an IP address object (raises ValueError if it's a hostname)"""
        return ip_address(self.address)


@dataclass(frozen=True, slots=True, kw_only=True)
class _MessageContent:
    kind: ClassVar[ContentKind]

    message: Mapping[str, Any]
    root: str
    count: int | float

    @classmethod
    def from_json(cls, value: Mapping[str, Any]) -> Self:
        return cls(message=value['message'], root=value['root'], count=value['count'])

    def to_json(self) -> JSONObject:
        return {'message': self.message, 'root': self.root, 'count': self.count}


@dataclass(frozen=True, slots=True, kw_only=True)
class RegistryEventContent(_MessageContent):
    """An identity registry event with the publisher's trie root and item count"""

    kind: ClassVar[ContentKind] = ContentKind.REGISTRY_EVENT

    message: IdentityRegistryEvent


@dataclass(frozen=True, slots=True, kw_only=True)
class UserContent(_MessageContent):
    """An application message with the publisher's trie root and item count"""

    kind: ClassVar[ContentKind] = ContentKind.USER

    message: ApplicationMessage


@dataclass(frozen=True, slots=True, kw_only=True)
class ContactInfoContent:
    """A node's peer id and the address it serves RPC requests on (if any)"""

    kind: ClassVar[ContentKind] = ContentKind.CONTACT_INFO

    peer_id: str
    rpc_address: NetworkAddress | None = None

    @classmethod
    def from_json(cls, value: Mapping[str, Any]) -> Self:
        rpc_address = value.get('rpcAddress')
        return cls(peer_id=value['peerId'], rpc_address=NetworkAddress.from_json(rpc_address) if rpc_address is not None else None)

    def to_json(self) -> JSONObject:
        data: JSONObject = {'peerId': self.peer_id}
        if self.rpc_address is not None:
            data['rpcAddress'] = self.rpc_address.to_json()
        return data


type Content = RegistryEventContent | UserContent | ContactInfoContent

_content_types: Mapping[ContentKind, type[Content]] = {
    ContentKind.REGISTRY_EVENT: RegistryEventContent,
    ContentKind.USER: UserContent,
    ContentKind.CONTACT_INFO: ContactInfoContent,
}


def content_type(kind: ContentKind) -> type[Content]:
    return _content_types[kind]


@dataclass(frozen=True, slots=True)
class Envelope:
    content: Content
    topics: Sequence[str]

    def __post_init__(self) -> None:
        # Store topics as a tuple to keep the envelope immutable. Strings are
        # sequences too, but a string is not a list of topics, so it is left
        # alone for the validator to reject.
        if isinstance(self.topics, Sequence) and not isinstance(self.topics, str | tuple):
            object.__setattr__(self, 'topics', tuple(self.topics))

    @classmethod
    def from_json(cls, value: Mapping[str, Any], *, kind: ContentKind) -> Self:
        return cls(content=content_type(kind).from_json(value['content']), topics=tuple(value['topics']))

    def to_json(self) -> JSONObject:
        return {'content': self.content.to_json(), 'topics': list(self.topics)}
