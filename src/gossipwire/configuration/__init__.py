# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

# The gossip configuration holds the topics used by the protocol and the
# interval at which nodes republish their contact info. It is created once
# when the node starts and is passed to the components that need it. It can
# be loaded from an XML document like this (all the elements are optional):
#
#   <gossip xmlns="urn:gossipwire:config">
#     <primary-topic>f_network_topic_primary</primary-topic>
#     <contact-topic>f_network_topic_contact</contact-topic>
#     <contact-interval>10000</contact-interval>
#     <max-message-size>65536</max-message-size>
#   </gossip>

from dataclasses import dataclass
from os import PathLike, fspath
from typing import ClassVar, Final, Self

from lxml import etree

from gossipwire.topics import GOSSIP_CONTACT_INTERVAL, NETWORK_TOPIC_CONTACT, NETWORK_TOPIC_PRIMARY

from .schema import ETreeElement, RelaxNGValidator, Validator

__all__ = 'ConfigurationError', 'GossipConfiguration', 'DEFAULT_CONFIGURATION'  # noqa: RUF022


NAMESPACE: Final[str] = 'urn:gossipwire:config'


class ConfigurationError(ValueError):
    """Raised when a gossip configuration is invalid."""


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=True)


@dataclass(frozen=True, slots=True, kw_only=True)
class GossipConfiguration:
    primary_topic: str = NETWORK_TOPIC_PRIMARY
    contact_topic: str = NETWORK_TOPIC_CONTACT
    contact_interval: int = GOSSIP_CONTACT_INTERVAL  # milliseconds
    max_message_size: int | None = None  # bytes, None means unlimited

    validator: ClassVar[Validator] = RelaxNGValidator('gossip.rng')

    def __post_init__(self) -> None:
        if not self.primary_topic or not self.contact_topic:
            raise ConfigurationError('The gossip topics cannot be empty')
        if self.primary_topic == self.contact_topic:
            raise ConfigurationError(f'The primary and contact topics must be different: {self.primary_topic!r}')
        if self.contact_interval <= 0:
            raise ConfigurationError(f'The contact interval must be a positive number of milliseconds: {self.contact_interval!r}')
        if self.max_message_size is not None and self.max_message_size <= 0:
            raise ConfigurationError(f'The maximum message size must be a positive number of bytes: {self.max_message_size!r}')

    @property
    def topics(self) -> tuple[str, str]:
        """All the gossip topics in use"""
        return self.contact_topic, self.primary_topic

    @property
    def contact_interval_seconds(self) -> float:
        return self.contact_interval / 1000

    def is_known_topic(self, topic: str) -> bool:
        return topic in self.topics

    @classmethod
    def from_xml(cls, element: ETreeElement) -> Self:
        if not cls.validator.validate(element):
            raise ConfigurationError(f'Invalid gossip configuration: {cls.validator.last_error}')

        def text(name: str) -> str | None:
            child = element.find(f'{{{NAMESPACE}}}{name}')
            return child.text.strip() if child is not None and child.text is not None else None

        arguments: dict[str, object] = {}
        if (primary_topic := text('primary-topic')) is not None:
            arguments['primary_topic'] = primary_topic
        if (contact_topic := text('contact-topic')) is not None:
            arguments['contact_topic'] = contact_topic
        if (contact_interval := text('contact-interval')) is not None:
            arguments['contact_interval'] = int(contact_interval)
        if (max_message_size := text('max-message-size')) is not None:
            arguments['max_message_size'] = int(max_message_size)
        return cls(**arguments)  # type: ignore[arg-type]

    @classmethod
    def from_string(cls, document: str | bytes) -> Self:
        if isinstance(document, str):
            document = document.encode()
        try:
            element = etree.fromstring(document, parser=_xml_parser())
        except etree.XMLSyntaxError as exc:
            raise ConfigurationError(f'Cannot parse the gossip configuration: {exc}') from exc
        return cls.from_xml(element)

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> Self:
        try:
            tree = etree.parse(fspath(path), parser=_xml_parser())
        except etree.XMLSyntaxError as exc:
            raise ConfigurationError(f'Cannot parse the gossip configuration from {path}: {exc}') from exc
        return cls.from_xml(tree.getroot())

    def to_xml(self) -> ETreeElement:
        element = etree.Element(f'{{{NAMESPACE}}}gossip', nsmap={None: NAMESPACE})
        etree.SubElement(element, f'{{{NAMESPACE}}}primary-topic').text = self.primary_topic
        etree.SubElement(element, f'{{{NAMESPACE}}}contact-topic').text = self.contact_topic
        etree.SubElement(element, f'{{{NAMESPACE}}}contact-interval').text = str(self.contact_interval)
        if self.max_message_size is not None:
            etree.SubElement(element, f'{{{NAMESPACE}}}max-message-size').text = str(self.max_message_size)
        return element

    def to_string(self) -> str:
        return etree.tostring(self.to_xml(), encoding='unicode', pretty_print=True)


DEFAULT_CONFIGURATION: Final[GossipConfiguration] = GossipConfiguration()
