"""Products API views.

Public, paginated catalog reads with filtering/search/ordering; writes are
admin-only.
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from accounts.permissions import IsAdminOrReadOnly

from .models import Product
from .serializers import ProductSerializer


logger = logging.getLogger(__name__)


class StandardResultsSetPagination(PageNumberPagination):
    """Default pagination used by most API endpoints."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class ProductViewSet(viewsets.ModelViewSet):
    """Products CRUD.

    - Anyone: list and retrieve.
    - Admins: create (a sample product to edit afterwards), update, delete.
    """

    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    pagination_class = StandardResultsSetPagination
    permission_classes = [IsAdminOrReadOnly]

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['category', 'brand']
    search_fields = ['name', 'brand', 'description']
    ordering_fields = ['name', 'price', 'rating', 'created_at']

    def create(self, request, *args, **kwargs):
        # Without a payload the admin console gets a placeholder to edit.
        data = request.data or {
            'name': 'Sample name',
            'price': '0.00',
            'brand': 'Sample brand',
            'category': 'Sample category',
            'count_in_stock': 0,
            'description': 'Sample description',
        }
        serializer = self.get_serializer(data=data)
        serializer.is_valid(raise_exception=True)
        product = serializer.save(user=request.user)
        if not product.image:
            product.image.name = '/images/sample.jpg'
            product.save(update_fields=['image'])
        logger.info("Product %s created by user %s", product.pk, request.user.pk)
        return Response(self.get_serializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        product_id = product.pk
        product.delete()
        logger.info("Product %s deleted by user %s", product_id, request.user.pk)
        return Response({'detail': 'Product deleted.'})
