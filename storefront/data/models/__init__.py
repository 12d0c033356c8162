from .data_filters import (
    BookFilters,
    OrderFilters,
    DeliveryFilters,
    NotificationFilters,
)

from .books import Author, Book, BooksPage, Category
from .orders import (
    DeliveryAssignment,
    Order,
    OrderAddress,
    OrderItem,
    OrderNote,
    PaymentInfo,
)
from .deliveries import (
    DeliveryManager,
    DeliveryRequest,
    DeliveryTask,
    ManagerAvailability,
)
from .ads import Ad
from .discounts import AppliedDiscount, DiscountCode, DiscountedBook
from .borrowings import BorrowRequest
from .notifications import Notification
from .list_response import (
    ActionResult,
    UnreadCount,
)

__all__ = [
    # Filter classes
    "BookFilters",
    "OrderFilters",
    "DeliveryFilters",
    "NotificationFilters",
    # Catalog
    "Author",
    "Book",
    "BooksPage",
    "Category",
    # Orders
    "DeliveryAssignment",
    "Order",
    "OrderAddress",
    "OrderItem",
    "OrderNote",
    "PaymentInfo",
    # Deliveries
    "DeliveryManager",
    "DeliveryRequest",
    "DeliveryTask",
    "ManagerAvailability",
    # Borrowing
    "BorrowRequest",
    # Marketing
    "AppliedDiscount",
    "Ad",
    "DiscountCode",
    "DiscountedBook",
    "Notification",
    # Envelope models
    "ActionResult",
    "UnreadCount",
]
