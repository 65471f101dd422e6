# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""External toolchain invocation and universal binary merging."""
