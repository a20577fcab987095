from django.urls import path

from .views import BookOrderView, OrderListView, OrderSearchView

urlpatterns = [
    path("book-order", BookOrderView.as_view(), name="book-order"),
    path("orders", OrderListView.as_view(), name="order-list"),
    path("search-orders", OrderSearchView.as_view(), name="order-search"),
]
