from django.urls import path

from .views import AddProductView, NearbyProductListView, ProductListView

urlpatterns = [
    path("add-product", AddProductView.as_view(), name="add-product"),
    path("products", ProductListView.as_view(), name="product-list"),
    path("products/nearby", NearbyProductListView.as_view(), name="product-nearby"),
]
