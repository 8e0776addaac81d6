"""Accounts API views.

Contains:
- Registration, login and logout
- Own-profile read/update
- Admin user management (list, retrieve, update, delete)
"""

import logging

from django.contrib.auth import get_user_model
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from products.views import StandardResultsSetPagination

from .permissions import IsAdmin
from .serializers import (
    AdminUserSerializer,
    AuthSerializer,
    ProfileSerializer,
    RegisterSerializer,
    UserSerializer,
    tokens_for_user,
)


logger = logging.getLogger(__name__)

User = get_user_model()


class AuthView(TokenObtainPairView):
    """Email + password login. Returns the JWT pair and the profile."""

    serializer_class = AuthSerializer


class LogoutView(APIView):
    """Blacklist the caller's refresh token."""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        token = request.data.get('refresh')
        if not token:
            return Response({'detail': 'Missing refresh token.'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            RefreshToken(token).blacklist()
        except TokenError:
            return Response({'detail': 'Invalid refresh token.'}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'detail': 'Logged out successfully.'})


class UserViewSet(viewsets.ModelViewSet):
    """User endpoints.

    - ``POST /api/users/``: public registration.
    - ``GET|PUT /api/users/profile/``: the authenticated user's own profile.
    - everything else: admin only.
    """

    queryset = User.objects.all().order_by('id')
    serializer_class = AdminUserSerializer
    pagination_class = StandardResultsSetPagination
    http_method_names = ['get', 'post', 'put', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action == 'create':
            return [AllowAny()]
        if self.action == 'profile':
            return [IsAuthenticated()]
        return [IsAuthenticated(), IsAdmin()]

    def get_serializer_class(self):
        if self.action == 'create':
            return RegisterSerializer
        if self.action == 'profile':
            return ProfileSerializer
        return AdminUserSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("Registered user %s", user.pk)
        return Response({**UserSerializer(user).data, **tokens_for_user(user)}, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        kwargs['partial'] = True
        return super().update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if user.is_admin:
            return Response({'detail': 'Cannot delete admin user.'}, status=status.HTTP_400_BAD_REQUEST)
        user.delete()
        logger.info("Deleted user %s", kwargs.get('pk'))
        return Response({'detail': 'User removed.'})

    @action(detail=False, methods=['get', 'put'])
    def profile(self, request):
        """Get or update the authenticated user's profile."""
        user = request.user
        if request.method == 'GET':
            return Response(self.get_serializer(user).data)

        serializer = self.get_serializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        user.refresh_from_db()
        return Response({**self.get_serializer(user).data, **tokens_for_user(user)})
