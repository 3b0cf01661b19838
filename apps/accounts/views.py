import logging

from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema

from .serializers import (
    UserSerializer,
    DeviceTokenSerializer,
    UserRegistrationSerializer,
    ProfileUpdateSerializer,
)
from .services import (
    register_user,
    update_profile as update_user_profile,
    InvalidAccountDataError,
    AccountTakenError,
)

logger = logging.getLogger(__name__)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


@extend_schema(
    request=UserRegistrationSerializer,
    responses={
        201: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Register a new user account and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Register a new user account."""
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    data = serializer.validated_data
    try:
        user = register_user(
            email=data['email'],
            username=data['username'],
            password=data['password'],
        )
    except InvalidAccountDataError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except AccountTakenError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    refresh = RefreshToken.for_user(user)

    return Response({
        'message': 'Registration successful.',
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    responses={200: UserSerializer},
    description="Get the authenticated user.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Return the authenticated user."""
    serializer = UserSerializer(request.user)
    return Response(serializer.data)


@extend_schema(
    request=ProfileUpdateSerializer,
    responses={
        200: UserSerializer,
        400: ErrorResponseSerializer,
        409: ErrorResponseSerializer,
    },
    description="Update the current user's username and/or email.",
    tags=['auth'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update user profile."""
    serializer = ProfileUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = update_user_profile(user=request.user, **serializer.validated_data)
    except InvalidAccountDataError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except AccountTakenError as e:
        return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

    return Response(UserSerializer(user).data)


@extend_schema(
    request=DeviceTokenSerializer,
    responses={200: UserSerializer},
    description="Register the push notification token of the user's device.",
    tags=['auth'],
)
@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def register_device(request):
    """Store the device token used for reminders and group notifications."""
    serializer = DeviceTokenSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    user = request.user
    user.notification_token = serializer.validated_data['notification_token']
    user.save(update_fields=['notification_token'])
    logger.info("Device token %s for user %s",
                "registered" if user.notification_token else "cleared", user.id)

    return Response(UserSerializer(user).data, status=status.HTTP_200_OK)
