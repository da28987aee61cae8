# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Herald - Discord and Supabase operations for automation clients.

Exposes a tool catalog, an execute endpoint and a server-sent event stream
over HTTP. See ``herald.server`` for the application.
"""

from .core.config import get_package_version

__version__ = get_package_version()
