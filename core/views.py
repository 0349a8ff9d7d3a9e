"""
Core App Views - Users & Company API
"""

from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from django.contrib.auth import get_user_model

from .models import Company
from .permissions import IsAdminRole, IsBillingOperator
from .serializers import UserSerializer, UserCreateSerializer, CompanySerializer

User = get_user_model()


class UserViewSet(viewsets.ModelViewSet):
    """
    ViewSet for User model.

    - List/Create/Destroy: Admin only
    - Retrieve/Update: Self only (admins see everyone)
    """

    queryset = User.objects.all()
    serializer_class = UserSerializer
    search_fields = ['email', 'full_name']

    def get_permissions(self):
        if self.action in ['list', 'create', 'destroy']:
            return [IsAdminRole()]
        return [permissions.IsAuthenticated()]

    def get_serializer_class(self):
        if self.action == 'create':
            return UserCreateSerializer
        return UserSerializer

    def get_queryset(self):
        user = self.request.user
        if user.is_admin_role:
            return User.objects.all()
        return User.objects.filter(pk=user.pk)

    @action(detail=False, methods=['get'])
    def me(self, request):
        """Get current user profile."""
        serializer = self.get_serializer(request.user)
        return Response(serializer.data)


class CompanyViewSet(viewsets.ModelViewSet):
    """CRUD for issuing companies; `active` returns the letterhead used on PDFs."""

    queryset = Company.objects.all()
    serializer_class = CompanySerializer
    permission_classes = [IsBillingOperator]
    search_fields = ['business_name', 'gstin']

    @action(detail=False, methods=['get'])
    def active(self, request):
        company = Company.get_active()
        if not company:
            return Response(
                {'error': 'No active company configured'},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response(self.get_serializer(company).data)
