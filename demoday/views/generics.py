from rest_framework.authentication import BasicAuthentication, SessionAuthentication
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView
from rest_framework_simplejwt.authentication import JWTAuthentication


class DemodayAPIView(APIView):
    """
    Base view for the Demoday API.

    Authentication is required by default; role checks happen in the core
    operations through ``core.policies``.
    """
    authentication_classes = [JWTAuthentication, SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]


def validated_data(serializer_class, data, **kwargs):
    """Run ``serializer_class`` over ``data``; DRF errors go to the exception handler."""
    serializer = serializer_class(data=data, **kwargs)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data
