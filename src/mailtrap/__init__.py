# -*- test-case-name: mailtrap -*-

# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
mailtrap: a minimal local SMTP server for development.

Every message submitted to it is accepted, summarised to the log and saved
to disk as an C{.eml} file.
"""

from mailtrap._version import __version__ as version

__version__ = version.short()
