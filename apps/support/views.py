from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.businesses.permissions import IsPlatformAdmin
from .serializers import (
    TicketInputSerializer,
    TicketStatusSerializer,
    TicketAssignSerializer,
    CommentInputSerializer,
    SupportTicketSerializer,
    TicketCommentSerializer,
)
from .services import (
    create_ticket,
    list_tickets,
    get_ticket,
    visible_comments,
    update_ticket_status,
    assign_ticket,
    add_comment,
    TicketNotFoundError,
    TicketValidationError,
    TicketPermissionError,
)


class TicketPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class SupportTicketViewSet(viewsets.GenericViewSet):
    """
    Support tickets.

    Reporters see their own tickets; platform admins see all of them and
    manage status and assignment.
    """
    serializer_class = SupportTicketSerializer
    pagination_class = TicketPagination

    def get_permissions(self):
        if self.action in ['set_status', 'assign']:
            return [IsAuthenticated(), IsPlatformAdmin()]
        return [IsAuthenticated()]

    @extend_schema(
        parameters=[
            OpenApiParameter('status', str, description='Filter by status (platform admins)'),
            OpenApiParameter('priority', str, description='Filter by priority (platform admins)'),
        ],
        tags=['support'],
    )
    def list(self, request):
        queryset, counts = list_tickets(
            user=request.user,
            status=request.query_params.get('status'),
            priority=request.query_params.get('priority'),
        )
        page = self.paginate_queryset(queryset)
        response = self.get_paginated_response(SupportTicketSerializer(page, many=True).data)
        response.data.update(counts)
        return response

    @extend_schema(request=TicketInputSerializer, responses={201: SupportTicketSerializer}, tags=['support'])
    def create(self, request):
        serializer = TicketInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            ticket = create_ticket(actor=request.user, **serializer.validated_data)
        except TicketValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(SupportTicketSerializer(ticket).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=['support'])
    def retrieve(self, request, pk=None):
        try:
            ticket = get_ticket(user=request.user, ticket_id=pk)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

        data = SupportTicketSerializer(ticket).data
        data['comments'] = TicketCommentSerializer(
            visible_comments(ticket=ticket, user=request.user), many=True
        ).data
        return Response(data)

    @extend_schema(request=TicketStatusSerializer, responses={200: SupportTicketSerializer}, tags=['support'])
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        serializer = TicketStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            ticket = update_ticket_status(
                actor=request.user,
                ticket_id=pk,
                status=serializer.validated_data['status'],
            )
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(SupportTicketSerializer(ticket).data)

    @extend_schema(request=TicketAssignSerializer, responses={200: SupportTicketSerializer}, tags=['support'])
    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        serializer = TicketAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            ticket = assign_ticket(
                actor=request.user,
                ticket_id=pk,
                assignee_id=serializer.validated_data['assignee_id'],
            )
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TicketValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(SupportTicketSerializer(ticket).data)

    @extend_schema(request=CommentInputSerializer, responses={201: TicketCommentSerializer}, tags=['support'])
    @action(detail=True, methods=['post'])
    def comments(self, request, pk=None):
        serializer = CommentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            comment = add_comment(actor=request.user, ticket_id=pk, **serializer.validated_data)
        except TicketNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except TicketPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except TicketValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(TicketCommentSerializer(comment).data, status=status.HTTP_201_CREATED)
