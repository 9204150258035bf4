from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.domains.commerce.domain.services.cart_service import CartConfig
from storefront.domains.commerce.domain.services.checkout_service import CheckoutConfig
from storefront.domains.commerce.domain.services.coupon_service import CouponConfig
from storefront.domains.commerce.domain.services.inventory_service import InventoryConfig
from storefront.domains.commerce.domain.services.tax_service import TaxBasis, TaxConfig
from storefront.domains.commerce.domain.value_objects.address import Location
from storefront.domains.commerce.domain.value_objects.money import FormattingProfile, SymbolPosition

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("colored", "json", "plain")


class StoreSettings(BaseSettings):
    """
    Store configuration loaded from the environment and ``.env``.

    Services never receive this object: each one gets the narrow config
    built by the matching ``*_config()`` method.
    """

    # Currency & formatting
    STORE_CURRENCY: str = Field("USD", description="ISO-4217 currency code")
    CURRENCY_POSITION: str = Field("left", description="left, right, left_space or right_space")
    THOUSAND_SEPARATOR: str = Field(",", description="Thousands separator")
    DECIMAL_SEPARATOR: str = Field(".", description="Decimal separator")
    NUMBER_OF_DECIMALS: int = Field(2, description="Rounding and display scale (0-4)")

    # Taxes
    PRICES_INCLUDE_TAX: bool = Field(False, description="Catalog prices already include tax")
    ENABLE_TAXES: bool = Field(True, description="Compute taxes at all")
    TAX_BASED_ON: str = Field("shipping", description="shipping, billing or base")
    STORE_BASE_COUNTRY: str = Field("US", description="Shop country, used when taxes are based on it")
    STORE_BASE_STATE: str = Field("", description="Shop state code")
    STORE_BASE_POSTCODE: str = Field("", description="Shop postcode")
    STORE_BASE_CITY: str = Field("", description="Shop city")

    # Coupons
    ENABLE_COUPONS: bool = Field(True, description="Allow coupons to be applied")

    # Inventory
    MANAGE_STOCK: bool = Field(True, description="Enforce stock quantities")
    LOW_STOCK_THRESHOLD: int = Field(5, description="Default low-stock threshold")
    HOLD_STOCK_MINUTES: int = Field(60, description="How long unpaid orders hold stock (caller enforced)")

    # Cart & checkout
    CART_EXPIRY_DAYS: int = Field(7, description="Days before an untouched cart expires")
    TERMS_PAGE_ID: str | None = Field(None, description="Terms page; when set checkout requires acceptance")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Root log level")
    LOG_FORMAT: str = Field("colored", description="colored, json or plain")
    LOG_FILE: str | None = Field(None, description="Optional JSON log file")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("STORE_CURRENCY")
    @classmethod
    def validate_currency(cls, v):
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("STORE_CURRENCY must be a 3-letter ISO code")
        return v

    @field_validator("CURRENCY_POSITION")
    @classmethod
    def validate_currency_position(cls, v):
        return SymbolPosition.from_string(v.strip()).value

    @field_validator("NUMBER_OF_DECIMALS")
    @classmethod
    def validate_number_of_decimals(cls, v):
        if not 0 <= v <= 4:
            raise ValueError("NUMBER_OF_DECIMALS must be between 0 and 4")
        return v

    @field_validator("TAX_BASED_ON")
    @classmethod
    def validate_tax_based_on(cls, v):
        return TaxBasis.from_string(v.strip()).value

    @field_validator("LOW_STOCK_THRESHOLD", "HOLD_STOCK_MINUTES")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("must be 0 or greater")
        return v

    @field_validator("CART_EXPIRY_DAYS")
    @classmethod
    def validate_cart_expiry(cls, v):
        if v < 1:
            raise ValueError("CART_EXPIRY_DAYS must be at least 1")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}")
        return v

    @computed_field
    @property
    def currency_symbol(self) -> str:
        """Symbol shown next to prices"""
        return self.formatting_profile().symbol

    @property
    def base_location(self) -> Location:
        """Shop address used when taxes are based on the store"""
        return Location(
            country=self.STORE_BASE_COUNTRY,
            state=self.STORE_BASE_STATE,
            postcode=self.STORE_BASE_POSTCODE,
            city=self.STORE_BASE_CITY,
        )

    # Per-service configuration

    def formatting_profile(self) -> FormattingProfile:
        return FormattingProfile(
            currency=self.STORE_CURRENCY,
            symbol_position=SymbolPosition(self.CURRENCY_POSITION),
            thousand_separator=self.THOUSAND_SEPARATOR,
            decimal_separator=self.DECIMAL_SEPARATOR,
            number_of_decimals=self.NUMBER_OF_DECIMALS,
        )

    def tax_config(self) -> TaxConfig:
        return TaxConfig(
            enable_taxes=self.ENABLE_TAXES,
            prices_include_tax=self.PRICES_INCLUDE_TAX,
            tax_based_on=TaxBasis(self.TAX_BASED_ON),
            base_location=self.base_location,
        )

    def inventory_config(self) -> InventoryConfig:
        return InventoryConfig(manage_stock=self.MANAGE_STOCK, low_stock_threshold=self.LOW_STOCK_THRESHOLD)

    def cart_config(self) -> CartConfig:
        return CartConfig(
            expiry_days=self.CART_EXPIRY_DAYS,
            prices_include_tax=self.PRICES_INCLUDE_TAX,
            enable_coupons=self.ENABLE_COUPONS,
        )

    def coupon_config(self) -> CouponConfig:
        return CouponConfig(enable_coupons=self.ENABLE_COUPONS)

    def checkout_config(self) -> CheckoutConfig:
        return CheckoutConfig(
            currency=self.STORE_CURRENCY,
            prices_include_tax=self.PRICES_INCLUDE_TAX,
            terms_page_id=self.TERMS_PAGE_ID,
        )


# Settings singleton
_settings_instance = None


def get_settings() -> StoreSettings:
    """
    Cached settings instance, so the environment is read only once.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = StoreSettings()
    return _settings_instance


def reset_settings() -> None:
    """Drop the cached instance; the next ``get_settings()`` reloads the environment."""
    global _settings_instance
    _settings_instance = None
