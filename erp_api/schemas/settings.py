from typing import List, Literal, Optional

from pydantic import Field

from .base import RequestModel
from .customers import AddressIn


class CurrencyIn(RequestModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    exchange_rate: float = Field(1, gt=0)
    is_active: bool = True


class CurrencySettingsIn(RequestModel):
    base_currency: Optional[str] = None
    supported_currencies: Optional[List[CurrencyIn]] = None
    default_display_currency: Optional[str] = None
    auto_update_rates: Optional[bool] = None
    update_frequency: Optional[Literal[('hourly', 'daily', 'weekly')]] = None


class InvoiceSettingsIn(RequestModel):
    prefix: Optional[str] = None
    number_format: Optional[str] = None
    footer_text: Optional[str] = None
    terms_and_conditions: Optional[str] = None


class PosSettingsIn(RequestModel):
    receipt_header: Optional[str] = None
    receipt_footer: Optional[str] = None
    show_tax_breakdown: Optional[bool] = None
    auto_print: Optional[bool] = None


class CompanySettingsIn(RequestModel):
    name: Optional[str] = None
    code: Optional[str] = None
    tax_id: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[AddressIn] = None
    default_currency: Optional[str] = None
    default_tax_rate: Optional[float] = Field(None, ge=0, le=100)
    currency_settings: Optional[CurrencySettingsIn] = None
    invoice_settings: Optional[InvoiceSettingsIn] = None
    pos_settings: Optional[PosSettingsIn] = None


class AppearanceIn(RequestModel):
    theme: Optional[Literal[('light', 'dark', 'auto')]] = None
    language: Optional[str] = None
    timezone: Optional[str] = None
    date_format: Optional[str] = None


class NotificationsIn(RequestModel):
    email: Optional[bool] = None
    sms: Optional[bool] = None
    push: Optional[bool] = None
    low_stock_alert: Optional[bool] = None
    new_order_alert: Optional[bool] = None
    payment_reminder: Optional[bool] = None


class SystemIn(RequestModel):
    maintenance_mode: Optional[bool] = None
    allow_registration: Optional[bool] = None
    session_timeout: Optional[int] = Field(None, ge=1)
    max_login_attempts: Optional[int] = Field(None, ge=1)
    password_policy: Optional[dict] = None
    backup_settings: Optional[dict] = None


class SettingsUpdate(RequestModel):
    company: Optional[CompanySettingsIn] = None
    appearance: Optional[AppearanceIn] = None
    notifications: Optional[NotificationsIn] = None
    system: Optional[SystemIn] = None
