from unittest.mock import MagicMock, patch

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
from apps.clients.models import Client, ClientStatus
from apps.invoices.services import create_invoice
from apps.projects.models import Project, Milestone, ProjectStatus


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a test freelancer."""
    return User.objects.create_user(
        email='testuser@example.com',
        password='TestPass123!',
        name='Test User',
        business_name='Test Studio',
    )


@pytest.fixture
def other_user(db):
    """Create and return a second freelancer."""
    return User.objects.create_user(
        email='otheruser@example.com',
        password='OtherPass123!',
        name='Other User',
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def other_client(other_user):
    """Return an API client authenticated as the second freelancer."""
    client = APIClient()
    refresh = RefreshToken.for_user(other_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def client_record(db, user):
    """Create and return an active client of the test user."""
    return Client.objects.create(
        owner=user,
        name='Acme Corp',
        email='billing@acme.example.com',
        company='Acme',
        status=ClientStatus.ACTIVE,
    )


@pytest.fixture
def other_client_record(db, other_user):
    """Create and return a client owned by the second freelancer."""
    return Client.objects.create(
        owner=other_user,
        name='Globex',
        email='ap@globex.example.com',
    )


@pytest.fixture
def project(db, user, client_record):
    """Create and return an active project with two milestones."""
    project = Project.objects.create(
        owner=user,
        client=client_record,
        name='Website Redesign',
        description='New marketing site',
        status=ProjectStatus.ACTIVE,
        total_amount=300000,
    )
    Milestone.objects.create(project=project, name='Design', amount=100000, order=0)
    Milestone.objects.create(project=project, name='Build', amount=200000, order=1)
    return project


@pytest.fixture
def milestone(project):
    """Return the first milestone of the test project."""
    return project.milestones.get(order=0)


@pytest.fixture
def invoice(db, user, client_record, project):
    """Create and return a draft invoice for $1,500.00."""
    return create_invoice(
        owner=user,
        client_id=client_record.id,
        project_id=project.id,
        line_items=[
            {'description': 'Design work', 'quantity': 10, 'unit_price': 10000},
            {'description': 'Hosting setup', 'quantity': 1, 'unit_price': 50000},
        ],
    )


@pytest.fixture
def mock_storage():
    """Patch the S3 client used by apps.common.storage."""
    client = MagicMock()
    client.generate_presigned_url.return_value = 'https://bucket.example.com/upload?signature=abc'
    with patch('apps.common.storage.get_client', return_value=client):
        yield client
