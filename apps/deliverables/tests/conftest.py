import pytest

from apps.deliverables.models import Deliverable


@pytest.fixture
def deliverable(user, project, milestone):
    """Version 1 of a design file stored in the bucket."""
    key = f'deliverables/{project.id}/1700000000000-homepage.fig'
    return Deliverable.objects.create(
        project=project,
        milestone=milestone,
        uploaded_by=user,
        file_name='homepage.fig',
        file_url=f'https://files.example.com/{key}',
        file_key=key,
        file_size=2048,
        mime_type='application/octet-stream',
        version=1,
    )
