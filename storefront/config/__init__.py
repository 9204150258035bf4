from storefront.config.settings import StoreSettings, get_settings, reset_settings

__all__ = ["StoreSettings", "get_settings", "reset_settings"]
