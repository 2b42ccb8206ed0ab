from .auth import User, SessionToken
from .security import SecurityEvent
from .clients import Client
from .catalog import Item, Shade
from .orders import Order, OrderItem, DocumentSequence

__all__ = [
    'User', 'SessionToken', 'SecurityEvent',
    'Client',
    'Item', 'Shade',
    'Order', 'OrderItem', 'DocumentSequence',
]
