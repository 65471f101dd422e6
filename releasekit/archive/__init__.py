# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Final artifact writers: tar.gz, zip and dmg."""
