# -*- test-case-name: mailtrap.test.test_script -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
The C{mailtrap} command.
"""

import sys

from twisted.internet import defer, endpoints, task
from twisted.logger import (
    FilteringLogObserver,
    LogLevelFilterPredicate,
    Logger,
    globalLogBeginner,
    textFileLogObserver,
)
from twisted.python import usage

from mailtrap.tap import Options, makeFactory

log = Logger()


def parseOptions(argv):
    """
    Parse C{argv}, exiting with status 1 and a message on standard error if
    it is not valid.

    @rtype: L{Options}
    """
    config = Options()
    try:
        config.parseOptions(argv)
    except usage.UsageError as ue:
        print(config, file=sys.stderr)
        print(f"{sys.argv[0]}: {ue}", file=sys.stderr)
        sys.exit(1)
    return config


def startLogging(config, logFile=None):
    """
    Send log events at or above the configured level to C{logFile}.
    """
    if logFile is None:
        logFile = sys.stdout
    predicate = LogLevelFilterPredicate(defaultLogLevel=config["logLevel"])
    globalLogBeginner.beginLoggingTo(
        [FilteringLogObserver(textFileLogObserver(logFile), [predicate])]
    )


def main(reactor, config):
    """
    Listen for SMTP connections until the process is stopped.

    @return: A L{Deferred} which fails if listening fails and otherwise
        never fires.
    """
    factory = makeFactory(config)
    endpoint = endpoints.serverFromString(reactor, config.endpointDescription())
    d = endpoint.listen(factory)

    def listening(port):
        log.info("SMTP server listening on port {port}...", port=port.getHost().port)
        return defer.Deferred()

    return d.addCallback(listening)


def run(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    config = parseOptions(argv)
    startLogging(config)
    task.react(main, [config])


__all__ = ["run", "main", "parseOptions", "startLogging"]
