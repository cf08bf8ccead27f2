from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase, APIClient
from profiles.models import Profile

User = get_user_model()


class RegistrationTests(APITestCase):
    def setUp(self):
        self.url = reverse("registration")
        self.client = APIClient()

    def payload(self, **overrides):
        data = {
            "username": "exampleUsername",
            "email": "example@mail.de",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "company": "Analytical Engines Ltd",
            "password": "StrongPassw0rd!",
            "repeated_password": "StrongPassw0rd!",
        }
        data.update(overrides)
        return data

    def test_registration_success_creates_client(self):
        resp = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertIn("token", resp.data)
        self.assertEqual(resp.data["username"], "exampleUsername")
        self.assertEqual(resp.data["role"], "client")

        user = User.objects.get(username="exampleUsername")
        self.assertEqual(user.first_name, "Ada")
        self.assertEqual(user.profile.role, Profile.Role.CLIENT)
        self.assertEqual(user.profile.company, "Analytical Engines Ltd")

    def test_role_in_payload_is_ignored(self):
        resp = self.client.post(self.url, self.payload(role="admin"), format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["role"], "client")

    def test_password_mismatch_400(self):
        resp = self.client.post(self.url, self.payload(repeated_password="DIFFERENT123!"), format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        fields = {e["field"] for e in resp.data["errors"]}
        self.assertIn("repeated_password", fields)

    def test_duplicate_username_400(self):
        User.objects.create_user(username="taken", email="t@mail.de", password="abc12345")
        resp = self.client.post(self.url, self.payload(username="taken"), format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        fields = {e["field"] for e in resp.data["errors"]}
        self.assertIn("username", fields)

    def test_duplicate_email_400(self):
        User.objects.create_user(username="u1", email="dup@mail.de", password="abc12345")
        resp = self.client.post(self.url, self.payload(email="dup@mail.de"), format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["message"], "Validation failed")
