"""
Shared utilities used across domains.
"""

from storefront.core.shared.logger import (
    ContextLogger,
    configure_from_settings,
    configure_logging,
    get_logger,
    get_service_logger,
    get_use_case_logger,
)

__all__ = [
    "ContextLogger",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "get_service_logger",
    "get_use_case_logger",
]
