"""
Views for projects app.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response
from rest_framework import status
from .models import Project
from .serializers import ProjectSerializer


@api_view(['GET', 'POST'])
def projects_list(request):
    """List projects or create a new one."""
    if request.method == 'GET':
        serializer = ProjectSerializer(Project.objects.all(), many=True)
        return Response(serializer.data)

    serializer = ProjectSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(
        {'error': 'Invalid request data', 'details': serializer.errors},
        status=status.HTTP_400_BAD_REQUEST
    )


@api_view(['GET'])
def project_detail(request, project_id: int):
    """Get a single project with the number of sites installed from it."""
    try:
        project = Project.objects.get(id=project_id)
    except Project.DoesNotExist:
        return Response({'error': 'Project not found'}, status=status.HTTP_404_NOT_FOUND)

    data = ProjectSerializer(project).data
    data['site_count'] = project.sites.count()
    return Response(data)
