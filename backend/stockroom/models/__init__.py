from .tenancy import Business
from .auth import User, ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_USER, ROLES
from .catalog import Category, Product
from .ledger import StockEntry, Sale

__all__ = [
    'Business',
    'User', 'ROLE_ADMIN', 'ROLE_EMPLOYEE', 'ROLE_USER', 'ROLES',
    'Category', 'Product',
    'StockEntry', 'Sale',
]
