# -*- test-case-name: mailtrap.test.test_store -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Saving received messages as C{.eml} files.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from zope.interface import implementer

from twisted.logger import Logger
from twisted.python.filepath import FilePath

from mailtrap.interfaces import IMessageStore


def _utcNow() -> datetime:
    return datetime.now(timezone.utc)


def messageFileName(when: datetime) -> str:
    """
    Name the file for a message received at C{when}.

    The name is the time to the millisecond, as C{yyyyMMdd_HHmmssfff.eml}.
    Two messages saved within the same millisecond get the same name.
    """
    return "{}{:03d}.eml".format(
        when.strftime("%Y%m%d_%H%M%S"), when.microsecond // 1000
    )


@implementer(IMessageStore)
class MessageStore:
    """
    An L{IMessageStore} which writes each message to its own file in a
    directory.

    @ivar directory: Where messages are written.
    @type directory: L{FilePath}
    """

    log = Logger()

    def __init__(
        self,
        directory: FilePath[str],
        now: Callable[[], datetime] = _utcNow,
    ) -> None:
        """
        @param directory: Where to write messages.
        @param now: A callable returning the current time as an aware UTC
            L{datetime}.  Only tests need to pass this.
        """
        self.directory = directory
        self._now = now

    def prepare(self) -> None:
        """
        Create the message directory if it is not already there.
        """
        if not self.directory.isdir():
            self.directory.makedirs(ignoreExistingDirectory=True)
            self.log.info("Created {directory}", directory=self.directory.path)

    def store(self, raw: str) -> FilePath[str]:
        """
        Write C{raw} to a new file, encoded as UTF-8.  Lone surrogates from
        C{surrogateescape} decoding are written back as the original bytes.

        @return: The file the message was written to.
        """
        path = self.directory.child(messageFileName(self._now()))
        path.setContent(raw.encode("utf-8", "surrogateescape"))
        self.log.info("Saved email to {path}", path=path.path)
        return path


__all__ = ["MessageStore", "messageFileName"]
