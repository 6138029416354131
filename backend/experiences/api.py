from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from .models import Experience
from .serializers import ExperienceSerializer, ReviewSerializer


class IsHostOrReadOnly(permissions.BasePermission):
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.is_superuser or obj.host_id == request.user.id


class ExperienceViewSet(viewsets.ModelViewSet):
    serializer_class = ExperienceSerializer
    permission_classes = [IsHostOrReadOnly]
    filterset_fields = ["category", "featured", "host"]
    search_fields = ["title", "location", "description"]
    ordering_fields = ["price", "rating", "created_at"]

    def get_queryset(self):
        return Experience.objects.select_related("host").order_by("-featured", "-created_at")

    def perform_create(self, serializer):
        serializer.save(host=self.request.user)

    def perform_destroy(self, instance):
        if instance.bookings.exists():
            raise PermissionDenied("Experiences with bookings cannot be deleted.")
        instance.delete()

    @action(detail=False, methods=["get"], url_path="mine", permission_classes=[permissions.IsAuthenticated])
    def mine(self, request):
        experiences = self.get_queryset().filter(host=request.user)
        serializer = self.get_serializer(experiences, many=True)
        return Response(serializer.data)

    @action(
        detail=True,
        methods=["get", "post"],
        url_path="reviews",
        permission_classes=[permissions.IsAuthenticatedOrReadOnly],
    )
    def reviews(self, request, pk=None):
        experience = self.get_object()

        if request.method.lower() == "get":
            reviews = experience.reviews.select_related("user")
            serializer = ReviewSerializer(reviews, many=True)
            return Response(serializer.data)

        serializer = ReviewSerializer(
            data=request.data,
            context={"request": request, "experience": experience},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save(experience=experience, user=request.user)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
