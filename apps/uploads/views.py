from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.groups.exceptions import NotFoundError, NotMemberError, ValidationError

from .serializers import ImageUploadSerializer, ImageReferenceSerializer
from .services import upload_profile_image, upload_group_image, upload_expense_image


def _uploaded_image(request):
    serializer = ImageUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data['image']


@extend_schema(
    request={'multipart/form-data': ImageUploadSerializer},
    responses={200: ImageReferenceSerializer},
    description="Replace the profile image of the current user.",
    tags=['uploads'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def profile_image(request):
    """Upload a profile image."""
    image = _uploaded_image(request)

    try:
        reference = upload_profile_image(user=request.user, image=image)
    except ValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'Profile image successfully updated', 'image_url': reference})


@extend_schema(
    request={'multipart/form-data': ImageUploadSerializer},
    responses={200: ImageReferenceSerializer},
    description="Replace the image of a group (members only).",
    tags=['uploads'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def group_image(request, group_id):
    """Upload a group image."""
    image = _uploaded_image(request)

    try:
        reference = upload_group_image(group_id=group_id, user=request.user, image=image)
    except NotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except NotMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except ValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'Group image successfully updated', 'image_url': reference})


@extend_schema(
    request={'multipart/form-data': ImageUploadSerializer},
    responses={200: ImageReferenceSerializer},
    description="Replace the image of an expense (group members only).",
    tags=['uploads'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def expense_image(request, group_id, expense_id):
    """Upload an expense image."""
    image = _uploaded_image(request)

    try:
        reference = upload_expense_image(
            group_id=group_id,
            expense_id=expense_id,
            user=request.user,
            image=image
        )
    except NotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except NotMemberError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except ValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'Expense image successfully updated', 'image_url': reference})
