# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Per-platform release pipeline.

Version -> build -> (merge) -> (bundle) -> staging -> archive, strictly in
that order. Every stage failure is fatal to the run.
"""
