# QuoteKit - Embeddable Quote Calculator Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Core infrastructure components for QuoteKit."""

from .cache import Cache, get_cache
from .config import Settings, get_settings
from .logging_utils import configure_logging, get_logger

__all__ = [
    "Cache",
    "Settings",
    "configure_logging",
    "get_cache",
    "get_logger",
    "get_settings",
]
