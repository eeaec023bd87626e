# -*- test-case-name: mailtrap.test.test_tap -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.


"""
Command line options and server construction for mailtrap.
"""

import sys

from twisted.logger import InvalidLogLevelError, LogLevel
from twisted.python import usage
from twisted.python.filepath import FilePath

from mailtrap import __version__
from mailtrap.smtp import MailTrapFactory
from mailtrap.store import MessageStore

DEFAULT_PORT = 2525


class Options(usage.Options):
    """
    An options list parser for mailtrap.

    @ivar longdesc: A long description of the server for use in the usage
        message.
    """

    synopsis = "[options]"

    optParameters = [
        [
            "port",
            "p",
            DEFAULT_PORT,
            "Specify the listening port.",
            int,
        ],
        [
            "interface",
            "i",
            "",
            "The interface to listen on. [default: all interfaces]",
        ],
        [
            "data-dir",
            "d",
            "data",
            "The directory received messages are written to.",
        ],
    ]

    longdesc = """
    mail-trap - Minimal local SMTP server for development

    Every message sent to it is accepted, summarised on the console and
    written to the data directory as an .eml file.

    Notes:
      When running apps inside Docker (like n8n), use 'host.docker.internal'
      as the SMTP host.
    """

    def __init__(self):
        usage.Options.__init__(self)
        self["logLevel"] = LogLevel.info

    opt_h = usage.Options.opt_help

    def opt_version(self):
        """
        Display mailtrap version and exit.
        """
        print(f"mailtrap {__version__}")
        sys.exit(0)

    def opt_log_level(self, levelName):
        """
        Set the minimum level of log events to show
        (debug, info, warn, error, critical). [default: info]
        """
        try:
            self["logLevel"] = LogLevel.levelWithName(levelName)
        except InvalidLogLevelError:
            raise usage.UsageError(f"Invalid log level: {levelName}")

    def postOptions(self):
        """
        Check the validity of the specified set of options.

        @raise UsageError: When the port is out of range.
        """
        if not 0 <= self["port"] <= 65535:
            raise usage.UsageError(
                "Port must be between 0 and 65535, not {}".format(self["port"])
            )

    def endpointDescription(self):
        """
        Return the server endpoint description to listen with.
        """
        description = "tcp:{}".format(self["port"])
        if self["interface"]:
            description += ":interface={}".format(self["interface"])
        return description


def makeFactory(config):
    """
    Build the factory for a mailtrap server.

    The data directory is created here, once, before anything listens.

    @type config: L{Options}
    @param config: The parsed command line.

    @rtype: L{MailTrapFactory}
    """
    store = MessageStore(FilePath(config["data-dir"]))
    store.prepare()
    return MailTrapFactory(store)


__all__ = ["DEFAULT_PORT", "Options", "makeFactory"]
