# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
releasekit: cross-platform release packaging for LibreCard.

Turns an already-buildable application into one versioned, ready-to-ship
artifact per platform (tarball, zip archive, or disk image).
"""

__version__: str = "0.1.0"
