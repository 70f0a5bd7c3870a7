# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for Impulse.

- config: Environment settings and the YAML loader used by the game catalogue
"""
