# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later


__all__ = 'GossipProtocolError', 'EncodeError', 'DecodeError'


class GossipProtocolError(ValueError):
    """Base class for the gossip envelope codec errors."""


class EncodeError(GossipProtocolError):
    """
    The envelope that was supplied for encoding is not valid.

    This indicates a bug in the component that built the envelope, as the
    envelopes built from well typed content should always be encodable.

    """


class DecodeError(GossipProtocolError):
    """
    The data received from the network is not a valid envelope.

    The data comes from untrusted peers, so this is an expected condition.
    The only sensible thing to do with the data is to discard it.

    """
