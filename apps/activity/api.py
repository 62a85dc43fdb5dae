import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import ActivityLogSerializer, ClientEventSerializer
from .services import log_activity

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def client_event(request):
    """Record an event sent by the front-end (``app_start``, ``background_switch``...)."""
    serializer = ClientEventSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'success': False, 'errors': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    additional_data = dict(data.get('additional_data') or {})
    if data.get('launch_type'):
        additional_data['launch_type'] = data['launch_type']

    entry = log_activity(request, data['action'], data.get('description', ''), additional_data, user=request.user)
    if entry is None:
        return Response(
            {'success': False, 'error': 'No se pudo registrar la actividad'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return Response(
        {'success': True, 'activity': ActivityLogSerializer(entry).data},
        status=status.HTTP_201_CREATED,
    )
