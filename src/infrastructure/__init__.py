# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for Impulse.

- storage: Performance and preference stores (in-memory and SQLAlchemy)
"""
