from storefront.data.models import BookFilters, DeliveryFilters, NotificationFilters, OrderFilters

def test_book_filters_drop_unset_values():
    """Test only selected book filters are sent."""
    filters = BookFilters(search="dune", category_id=3, min_price=0, max_price=10.0, new_only=False, sort_by="price", sort_order="asc")
    params = filters.to_query_params()
    assert params == {"search": "dune", "min_price": 0, "max_price": 10.0, "sort_by": "price", "sort_order": "asc"}

def test_book_filters_keep_false_borrow_flag():
    """Test available_to_borrow=False (purchase only) is still sent."""
    params = BookFilters(available_to_borrow=False, new_only=True).to_query_params()
    assert params == {"available_to_borrow": False, "new_only": True}

def test_order_filters_skip_all_status():
    """Test the 'all' status means no status filter."""
    assert OrderFilters(status="all", search="ORD").to_query_params() == {"search": "ORD"}
    assert OrderFilters(status="pending", order_type="borrowing").to_query_params() == {"status": "pending", "order_type": "borrowing"}

def test_delivery_filters_use_type_key():
    """Test delivery_type is sent as 'type'."""
    assert DeliveryFilters(status="pending", delivery_type="borrow").to_query_params() == {"status": "pending", "type": "borrow"}

def test_notification_filters():
    """Test unread_only is only sent when set."""
    assert NotificationFilters(unread_only=False).to_query_params() == {}
    assert NotificationFilters(unread_only=True, is_read=False).to_query_params() == {"unread_only": True, "is_read": False}
