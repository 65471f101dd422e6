# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Housekeeping for the release output directory."""
