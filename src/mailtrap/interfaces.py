# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Interfaces for L{mailtrap}.
"""

from zope.interface import Interface


class IMessageStore(Interface):
    """
    Somewhere to keep the raw text of received messages.
    """

    def prepare():
        """
        Get ready to store messages, for example by creating a directory.

        This is called once, before the server starts listening.
        """

    def store(raw):
        """
        Keep a received message.

        @type raw: L{str}
        @param raw: The message exactly as it was received, lines joined
            with CRLF.

        @return: Something identifying where the message was put.

        @raise OSError: If the message could not be written.  This is not
            handled by the caller and ends the session that received the
            message.
        """


__all__ = ["IMessageStore"]
