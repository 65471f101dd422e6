# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Build identifier derived from the current source revision."""
