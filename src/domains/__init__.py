# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain layer for Impulse.

Domains:
    training: Trial engines, session control, adaptive difficulty,
        workout composition and progress tracking.
"""
