import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User
from apps.notifications.models import Notification, NotificationType


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new user."""
        url = reverse('users:register')
        data = {
            'email': 'newuser@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'name': 'New User',
        }
        response = api_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Registration successful'
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['name'] == 'New User'
        assert response.data['user']['currency'] == 'USD'
        assert User.objects.filter(email='newuser@example.com').exists()

    def test_register_creates_welcome_notification(self, api_client):
        """New accounts start with a welcome notification."""
        url = reverse('users:register')
        data = {
            'email': 'welcome@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        api_client.post(url, data, format='json')

        user = User.objects.get(email='welcome@example.com')
        notification = Notification.objects.get(user=user)
        assert notification.type == NotificationType.WELCOME
        assert notification.read is False

    def test_register_without_name(self, api_client):
        """Name is optional."""
        url = reverse('users:register')
        data = {
            'email': 'minimal@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert User.objects.get(email='minimal@example.com').get_display_name() == 'minimal'

    def test_register_duplicate_email(self, api_client, user):
        """Cannot register with an existing email, regardless of case."""
        url = reverse('users:register')
        data = {
            'email': user.email.upper(),
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_register_password_mismatch(self, api_client):
        """Registration fails when passwords don't match."""
        url = reverse('users:register')
        data = {
            'email': 'mismatch@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'DifferentPass123!',
        }
        response = api_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data

    def test_register_weak_password(self, api_client):
        """Registration fails with weak password."""
        url = reverse('users:register')
        data = {
            'email': 'weak@example.com',
            'password': '123',
            'password_confirm': '123',
        }
        response = api_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not User.objects.filter(email='weak@example.com').exists()


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        """Successfully login with valid credentials."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Login successful'
        assert 'access' in response.data['tokens']
        assert response.data['user']['email'] == user.email

    def test_login_wrong_password(self, api_client, user):
        """Login fails with wrong password."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'WrongPassword123!'}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert 'error' in response.data

    def test_login_nonexistent_user(self, api_client):
        """Login fails for non-existent user."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': 'nobody@example.com', 'password': 'SomePass123!'}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive_user(self, api_client, user_inactive):
        """Deactivated accounts get 403."""
        url = reverse('users:login')
        response = api_client.post(url, {'email': user_inactive.email, 'password': 'TestPass123!'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_updates_last_login(self, api_client, user):
        """Login updates last_login timestamp."""
        url = reverse('users:login')
        api_client.post(url, {'email': user.email, 'password': 'TestPass123!'}, format='json')

        user.refresh_from_db()
        assert user.last_login is not None


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestGetCurrentUser:
    """Tests for GET /api/auth/user/"""

    def test_get_current_user(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['business_name'] == 'Test Studio'
        assert response.data['stripe_connected'] is False

    def test_get_current_user_unauthenticated(self, api_client):
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Business Settings Tests
# =============================================================================

@pytest.mark.django_db
class TestBusinessSettings:
    """Tests for GET/PATCH /api/auth/settings/"""

    def test_get_settings(self, authenticated_client, user):
        url = reverse('users:settings')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['stripe_account_id'] is None
        assert response.data['email_invoice_paid'] is True
        assert response.data['email_contract_signed'] is True

    def test_update_business_profile(self, authenticated_client, user):
        """PATCH updates only the fields sent."""
        url = reverse('users:settings')
        data = {
            'business_name': 'Pixel & Co',
            'business_address': '1 Main St\nSpringfield',
            'tax_id': 'VAT-123',
            'currency': 'EUR',
        }
        response = authenticated_client.patch(url, data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['currency'] == 'EUR'
        user.refresh_from_db()
        assert user.business_name == 'Pixel & Co'
        assert user.tax_id == 'VAT-123'
        assert user.name == 'Test User'

    def test_invalid_currency_rejected(self, authenticated_client):
        url = reverse('users:settings')
        response = authenticated_client.patch(url, {'currency': 'XYZ'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_email_is_not_editable(self, authenticated_client, user):
        """Unknown fields are ignored."""
        url = reverse('users:settings')
        authenticated_client.patch(url, {'email': 'changed@example.com'}, format='json')

        user.refresh_from_db()
        assert user.email == 'testuser@example.com'

    def test_settings_unauthenticated(self, api_client):
        url = reverse('users:settings')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestNotificationPreferences:
    """Tests for PATCH /api/auth/settings/notifications/"""

    def test_toggle_preference(self, authenticated_client, user):
        url = reverse('users:notification-preferences')
        response = authenticated_client.patch(url, {'email_weekly_digest': False}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email_weekly_digest'] is False
        user.refresh_from_db()
        assert user.email_weekly_digest is False
        assert user.email_invoice_paid is True


# =============================================================================
# Logo Tests
# =============================================================================

@pytest.mark.django_db
class TestLogoUpload:
    """Tests for POST /api/auth/settings/logo/upload-url/ and PUT /api/auth/settings/logo/"""

    def test_upload_url_for_image(self, authenticated_client, user, mock_storage):
        url = reverse('users:logo-upload-url')
        data = {'file_name': 'my logo.png', 'content_type': 'image/png'}
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['upload_url'] == 'https://bucket.example.com/upload?signature=abc'
        assert response.data['key'].startswith(f'logos/{user.id}/')
        assert response.data['key'].endswith('-my_logo.png')
        assert response.data['file_url'] == f"https://files.example.com/{response.data['key']}"

    def test_upload_url_rejects_non_image(self, authenticated_client, mock_storage):
        url = reverse('users:logo-upload-url')
        data = {'file_name': 'logo.pdf', 'content_type': 'application/pdf'}
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Logo must be an image file'
        mock_storage.generate_presigned_url.assert_not_called()

    def test_upload_url_storage_failure(self, authenticated_client, mock_storage):
        mock_storage.generate_presigned_url.side_effect = RuntimeError('boom')
        url = reverse('users:logo-upload-url')
        data = {'file_name': 'logo.png', 'content_type': 'image/png'}
        response = authenticated_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_502_BAD_GATEWAY

    def test_replace_logo_deletes_old_file(self, authenticated_client, user, mock_storage):
        user.logo_url = 'https://files.example.com/logos/old.png'
        user.save()

        url = reverse('users:logo')
        response = authenticated_client.put(
            url, {'logo_url': 'https://files.example.com/logos/new.png'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['logo_url'] == 'https://files.example.com/logos/new.png'
        mock_storage.delete_object.assert_called_once()
        assert mock_storage.delete_object.call_args.kwargs['Key'] == 'logos/old.png'

    def test_clear_logo(self, authenticated_client, user, mock_storage):
        user.logo_url = 'https://files.example.com/logos/old.png'
        user.save()

        url = reverse('users:logo')
        response = authenticated_client.put(url, {'logo_url': None}, format='json')

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.logo_url == ''

    def test_external_logo_is_not_deleted(self, authenticated_client, user, mock_storage):
        """Only files in our bucket are removed."""
        user.logo_url = 'https://cdn.elsewhere.com/logo.png'
        user.save()

        url = reverse('users:logo')
        authenticated_client.put(url, {'logo_url': ''}, format='json')

        mock_storage.delete_object.assert_not_called()

    def test_delete_failure_does_not_block_update(self, authenticated_client, user, mock_storage):
        mock_storage.delete_object.side_effect = RuntimeError('bucket unavailable')
        user.logo_url = 'https://files.example.com/logos/old.png'
        user.save()

        url = reverse('users:logo')
        response = authenticated_client.put(
            url, {'logo_url': 'https://files.example.com/logos/new.png'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.logo_url == 'https://files.example.com/logos/new.png'


# =============================================================================
# User Model Tests
# =============================================================================

@pytest.mark.django_db
class TestUserModel:
    """Tests for User model methods."""

    def test_create_user(self, db):
        user = User.objects.create_user(email='model@example.com', password='TestPass123!')

        assert user.check_password('TestPass123!')
        assert user.is_active is True
        assert user.is_staff is False
        assert user.currency == 'USD'

    def test_create_superuser(self, db):
        user = User.objects.create_superuser(email='admin@example.com', password='AdminPass123!')

        assert user.is_staff is True
        assert user.is_superuser is True

    def test_get_display_name(self, user):
        """get_display_name returns name or email prefix."""
        assert user.get_display_name() == 'Test User'

        user.name = ''
        assert user.get_display_name() == 'testuser'

    def test_business_info(self, user):
        """Blank optional fields come back as None."""
        assert user.business_info() == {
            'name': 'Test Studio',
            'email': 'testuser@example.com',
            'address': None,
            'tax_id': None,
            'logo_url': None,
        }

    def test_business_name_falls_back_to_name(self, user):
        user.business_name = ''
        assert user.get_business_name() == 'Test User'

    def test_user_str(self, user):
        assert str(user) == user.email
