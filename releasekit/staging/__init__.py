# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Staging directory and application bundle assembly."""
