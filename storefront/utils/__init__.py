"""Utility modules for Storefront."""

from storefront.utils.flash import FLASH_SESSION_KEY, flash, pop_flashes

__all__ = [
    "FLASH_SESSION_KEY",
    "flash",
    "pop_flashes",
]
