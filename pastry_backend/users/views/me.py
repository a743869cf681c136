# users/views/me.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from users.serializers import MeSerializer, ProfileUpdateSerializer


class MeView(APIView):
    """
    GET   /api/auth/me/   the caller's profile
    PATCH /api/auth/me/   edit name / phone (email and role are fixed)
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MeSerializer

    @extend_schema(tags=["Auth"], responses={200: MeSerializer})
    def get(self, request):
        return Response(MeSerializer(request.user).data)

    @extend_schema(tags=["Auth"], request=ProfileUpdateSerializer, responses={200: MeSerializer})
    def patch(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(MeSerializer(user).data, status=status.HTTP_200_OK)
