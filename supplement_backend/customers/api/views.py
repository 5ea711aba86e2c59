# customers/api/views.py

"""
CUSTOMER VIEWSET

- CRUD for the customer list used by the POS customer picker
- DELETE is refused with CUSTOMER_HAS_SALES when sales reference the customer
"""

from django.db.models import Q
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.errors import domain_error_response
from customers.api.serializers import CustomerSerializer
from customers.models import Customer
from customers.services.customer_service import CustomerServiceError, delete_customer


class CustomerViewSet(viewsets.ModelViewSet):
    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Customer.objects.all().order_by("name")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(phone__icontains=q))

        return qs

    def destroy(self, request, *args, **kwargs):
        customer = self.get_object()
        try:
            delete_customer(customer_id=customer.pk)
        except CustomerServiceError as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)
