# folio-term — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
folio-term core package.

An interactive, command-driven terminal emulator for a personal portfolio.
Views feed raw input events into TerminalController and render its
snapshots.
"""
from .kernel import TerminalController as TerminalController  # noqa: F401 (re-export)
