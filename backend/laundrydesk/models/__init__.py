from .auth import User, SessionToken
from .sequences import DocumentSequence
from .orders import (
    Order,
    OrderService,
    OrderStatus,
    PaymentStatus,
    ORDER_STATUSES,
    PAYMENT_STATUSES,
    SERVICE_TYPES,
    CLOTH_TYPES,
)
from .expenses import Expense
from .settings import BusinessSettings

__all__ = [
    'User', 'SessionToken',
    'DocumentSequence',
    'Order', 'OrderService', 'OrderStatus', 'PaymentStatus',
    'ORDER_STATUSES', 'PAYMENT_STATUSES', 'SERVICE_TYPES', 'CLOTH_TYPES',
    'Expense',
    'BusinessSettings',
]
