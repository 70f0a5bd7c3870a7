"""Impulse cognitive training engine.

Timed trial games across five skill categories, adaptive difficulty,
and workout composition driven by each player's performance history.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "0.1.0"
