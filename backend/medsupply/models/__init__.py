from .clients import Client
from .inventory import Product
from .sales import Sale, SaleLine
from .settings import CompanySettings, COMPANY_SETTINGS_KEY
from .auth import User, SessionToken

__all__ = [
    'Client',
    'Product',
    'Sale', 'SaleLine',
    'CompanySettings', 'COMPANY_SETTINGS_KEY',
    'User', 'SessionToken',
]
