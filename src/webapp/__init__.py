# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Multi-user web application skeleton.

Registration, server side sessions, per-user settings and an admin user
management surface on top of pluggable storage (YAML files or a database).
"""

__version__ = "0.1.0"
