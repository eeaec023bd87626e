# -*- test-case-name: mailtrap.test.test_smtp -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
The server side of a forgiving subset of SMTP.

A session accepts any command it does not understand with C{250 OK}, takes
exactly one message and then hangs up.  There is no idle timeout.
"""

import sys

from constantly import NamedConstant, Names

from twisted.internet import protocol
from twisted.logger import Logger
from twisted.protocols import basic

from mailtrap.mime import decodeMessage, displayContent, formatLabel

GREETING = "220 localhost Simple SMTP Server"


def _printable(text):
    """
    Replace the undecodable bytes carried in C{text} with U+FFFD so that it
    can be written to a log.
    """
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


class SessionMode(Names):
    """
    What a session does with the next line it receives.
    """

    COMMAND = NamedConstant()
    DATA = NamedConstant()


class MailTrapSMTP(basic.LineOnlyReceiver):
    """
    SMTP server-side protocol which accepts a single message.

    @ivar sender: The argument of the last I{MAIL FROM} command.
    @ivar recipient: The argument of the last I{RCPT TO} command.
    @ivar mode: A L{SessionMode} constant.
    @ivar buffer: Lines of the message being received, without their line
        terminators.  Bytes which are not UTF-8 are kept as lone surrogates
        (C{surrogateescape}) so that the stored message matches what was sent.
    @ivar store: An L{IMessageStore <mailtrap.interfaces.IMessageStore>}
        provider to which the message is handed.
    """

    # Clients may end lines with a bare LF; a trailing CR is stripped.
    delimiter = b"\n"

    # No limit on line length; a message is never refused for its size.
    MAX_LENGTH = sys.maxsize

    log = Logger()

    store = None

    def __init__(self, store=None):
        self.mode = SessionMode.COMMAND
        self.sender = None
        self.recipient = None
        self.buffer = []
        if store is not None:
            self.store = store

    def connectionMade(self):
        self.log.info("Connection from {peer}", peer=self.transport.getPeer())
        self.reply(GREETING)

    def connectionLost(self, reason):
        self.log.info(
            "Connection closed: {reason}", reason=reason.getErrorMessage()
        )

    def reply(self, line):
        """
        Send one line to the client.
        """
        self.transport.write(line.encode("ascii") + b"\r\n")

    def lineReceived(self, line):
        if line.endswith(b"\r"):
            line = line[:-1]
        return getattr(self, "state_" + self.mode.name)(
            line.decode("utf-8", "surrogateescape")
        )

    def state_COMMAND(self, line):
        self.log.debug("C: {line}", line=_printable(line))

        if line.startswith("HELO") or line.startswith("EHLO"):
            self.reply("250 Hello")
        elif line.startswith("MAIL FROM:"):
            self.sender = line[10:].strip()
            self.reply("250 OK")
        elif line.startswith("RCPT TO:"):
            self.recipient = line[8:].strip()
            self.reply("250 OK")
        elif line == "DATA":
            self.reply("354 End data with <CR><LF>.<CR><LF>")
            self.buffer = []
            self.mode = SessionMode.DATA
        elif line == "QUIT":
            self.reply("221 Bye")
            self.transport.loseConnection()
        else:
            # Anything else, extension probes included, is acknowledged.
            self.reply("250 OK")

    def state_DATA(self, line):
        # A body line of ".." is kept as it is; there is no dot-unstuffing.
        if line == ".":
            self.messageReceived("".join(b + "\r\n" for b in self.buffer))
        else:
            self.buffer.append(line)

    def messageReceived(self, raw):
        """
        Handle a complete message: log a summary of it, store it, tell the
        client it was accepted and end the session.

        Any exception raised by the store propagates, and the connection is
        dropped without a reply.

        @param raw: The message text, each line terminated by CRLF.
        """
        message = decodeMessage(raw)
        self.logMessage(message)
        self.store.store(raw)
        self.reply("250 OK: Message accepted")
        self.transport.loseConnection()

    def logMessage(self, message):
        """
        Emit the summary event for a received message.

        @type message: L{ParsedMessage <mailtrap.mime.ParsedMessage>}
        """
        fmt = (
            "=== Received email ===\n"
            "Sender: {sender}\n"
            "Recipient: {recipient}\n"
            "Subject: {subject}\n"
            "Content-Type: {contentType}\n"
            "Format: {formatLabel}"
        )
        content = displayContent(message)
        if content:
            fmt += "\n\n{content}"
        self.log.info(
            fmt,
            sender=_printable(self.sender or ""),
            recipient=_printable(self.recipient or ""),
            subject=_printable(message.subject or "(no subject)"),
            contentType=_printable(message.contentType or "text/plain"),
            formatLabel=_printable(formatLabel(message)),
            content=_printable(content),
            parsed=message,
        )


class MailTrapFactory(protocol.ServerFactory):
    """
    Factory for L{MailTrapSMTP}; every session shares one store.

    @ivar store: The L{IMessageStore <mailtrap.interfaces.IMessageStore>}
        provider given to each protocol.
    """

    protocol = MailTrapSMTP

    def __init__(self, store):
        self.store = store

    def buildProtocol(self, addr):
        p = protocol.ServerFactory.buildProtocol(self, addr)
        p.store = self.store
        return p


__all__ = ["GREETING", "SessionMode", "MailTrapSMTP", "MailTrapFactory"]
