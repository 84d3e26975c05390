from .catalog import Product, StockRecord
from .documents import Counter, Order, OrderLine, Purchase, PurchaseLine, StockLoss

__all__ = [
    'Product', 'StockRecord',
    'Counter', 'Order', 'OrderLine', 'Purchase', 'PurchaseLine', 'StockLoss',
]
