# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

# The topic identifiers are part of the wire protocol. Peers subscribe using
# the exact string values, so they must never change.

from enum import StrEnum
from typing import Final

__all__ = 'GossipTopic', 'NETWORK_TOPIC_PRIMARY', 'NETWORK_TOPIC_CONTACT', 'GOSSIP_TOPICS', 'GOSSIP_CONTACT_INTERVAL'  # noqa: RUF022


class GossipTopic(StrEnum):
    PRIMARY = 'f_network_topic_primary'  # registry events and user messages
    CONTACT = 'f_network_topic_contact'  # node contact info

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}.{self.name}'


NETWORK_TOPIC_PRIMARY: Final[str] = GossipTopic.PRIMARY.value
NETWORK_TOPIC_CONTACT: Final[str] = GossipTopic.CONTACT.value

GOSSIP_TOPICS: Final[tuple[str, ...]] = (NETWORK_TOPIC_CONTACT, NETWORK_TOPIC_PRIMARY)

GOSSIP_CONTACT_INTERVAL: Final[int] = 10_000  # milliseconds between contact info republishing
