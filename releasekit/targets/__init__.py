# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Static table of supported release targets."""
