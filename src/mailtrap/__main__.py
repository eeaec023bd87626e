# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

# Make the mailtrap package executable with the default behaviour of
# running the mailtrap server.


import sys

from mailtrap.scripts.mailtrap import run

if __name__ == "__main__":
    sys.exit(run())
