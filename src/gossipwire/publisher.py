# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import asyncio
import logging
from typing import Protocol, Self

from gossipwire.configuration import DEFAULT_CONFIGURATION, GossipConfiguration
from gossipwire.protocol import ContactInfoContent, Envelope, EnvelopeCodec, NetworkAddress

__all__ = 'GossipTransport', 'ContactInfoPublisher'


log = logging.getLogger(__name__)


class GossipTransport(Protocol):
    """The pub-sub layer that broadcasts data to the peers subscribed to a topic"""

    async def publish(self, topic: str, data: bytes, /) -> None: ...


class ContactInfoPublisher:
    """
    Periodically broadcast this node's contact info on the contact topic.

    The contact info is published once immediately after start, and then
    every configuration.contact_interval milliseconds until stopped. A
    failure to publish is logged and the publisher will try again at the
    next interval.
    """

    _task: asyncio.Task[None] | None

    def __init__(self, peer_id: str, transport: GossipTransport, *, rpc_address: NetworkAddress | None = None, configuration: GossipConfiguration = DEFAULT_CONFIGURATION, codec: EnvelopeCodec | None = None) -> None:
        self.peer_id = peer_id
        self.rpc_address = rpc_address
        self.transport = transport
        self.configuration = configuration
        self.codec = codec if codec is not None else EnvelopeCodec(configuration)
        self._task = None

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(peer_id={self.peer_id!r}, rpc_address={self.rpc_address!r}, configuration={self.configuration!r})'

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.stop()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def contact_envelope(self) -> Envelope:
        return Envelope(content=ContactInfoContent(peer_id=self.peer_id, rpc_address=self.rpc_address), topics=[self.configuration.contact_topic])

    async def publish_once(self) -> None:
        envelope = self.contact_envelope()
        data = self.codec.encode(envelope).unwrap()  # an EncodeError here means the peer_id or rpc_address are wrong
        for topic in envelope.topics:
            await self.transport.publish(topic, data)

    def start(self) -> None:
        if self._task is not None:
            return
        self.codec.encode(self.contact_envelope()).unwrap()  # fail early, the contact info never changes
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        # wait without awaiting the task itself, so that a cancellation of the caller is not mistaken for the one of the task
        await asyncio.wait({task})
        if not task.cancelled():
            task.result()

    async def _run(self) -> None:
        while True:
            try:
                await self.publish_once()
            except Exception as exc:  # noqa: BLE001
                log.warning('Failed to publish the contact info for %s: %s', self.peer_id, exc)
            await asyncio.sleep(self.configuration.contact_interval_seconds)
