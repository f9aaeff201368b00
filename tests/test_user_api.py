"""Tests for the /api/user endpoints."""

from datetime import date, timedelta

import pytest
import yaml
from fastapi import status


@pytest.mark.integration
class TestProfileAPI:
    """Test profile read/update."""

    def test_get_profile(self, client, auth_cookie):
        response = client.get("/api/user/profile", headers=auth_cookie)
        assert response.status_code == status.HTTP_200_OK
        profile = response.json()["profile"]
        assert profile["firstName"] == "Test"
        assert profile["lastName"] == "User"
        assert profile["savedTips"] == []
        assert "userId" not in profile

    def test_get_profile_requires_auth(self, client):
        response = client.get("/api/user/profile")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Authentication required"}

    def test_get_missing_profile(self, client, auth_cookie, existing_user, user_service):
        user_service.store.delete_profile(existing_user.id)
        response = client.get("/api/user/profile", headers=auth_cookie)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_profile(self, client, auth_cookie):
        response = client.put(
            "/api/user/profile",
            json={
                "firstName": "Grace",
                "dateOfBirth": "1985-12-09",
                "gender": "female",
                "conditions": [{"id": "c1", "name": "Migraine"}],
            },
            headers=auth_cookie,
        )
        assert response.status_code == status.HTTP_200_OK
        profile = response.json()["profile"]
        assert profile["firstName"] == "Grace"
        assert profile["lastName"] == "User"
        assert profile["dateOfBirth"] == "1985-12-09"
        assert profile["gender"] == "female"
        assert profile["conditions"] == [{"id": "c1", "name": "Migraine"}]

        # Persisted
        profile = client.get("/api/user/profile", headers=auth_cookie).json()["profile"]
        assert profile["firstName"] == "Grace"
        assert profile["conditions"][0]["name"] == "Migraine"

    def test_partial_update_validates_present_fields_only(self, client, auth_cookie):
        response = client.put("/api/user/profile", json={"gender": "robot"}, headers=auth_cookie)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        errors = response.json()["errors"]
        assert list(errors) == ["gender"]

    def test_clear_date_of_birth(self, client, auth_cookie):
        client.put("/api/user/profile", json={"dateOfBirth": "1990-01-01"}, headers=auth_cookie)
        response = client.put("/api/user/profile", json={"dateOfBirth": ""}, headers=auth_cookie)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["profile"]["dateOfBirth"] is None

    def test_future_date_of_birth(self, client, auth_cookie):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        response = client.put("/api/user/profile", json={"dateOfBirth": tomorrow}, headers=auth_cookie)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"]["dateOfBirth"] == ["Date of birth cannot be in the future"]

    def test_condition_names_sanitized(self, client, auth_cookie):
        response = client.put(
            "/api/user/profile",
            json={"conditions": [{"id": "c1", "name": "<script>"}]},
            headers=auth_cookie,
        )
        assert response.json()["profile"]["conditions"][0]["name"] == "&lt;script&gt;"

    def test_empty_condition_name_rejected(self, client, auth_cookie):
        response = client.put(
            "/api/user/profile",
            json={"conditions": [{"id": "c1", "name": ""}]},
            headers=auth_cookie,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "conditions" in response.json()["errors"]

    def test_profile_rate_limited(self, client, auth_cookie):
        for _ in range(60):
            client.get("/api/user/profile", headers=auth_cookie)
        response = client.get("/api/user/profile", headers=auth_cookie)
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.headers["Retry-After"] == "60"


@pytest.mark.integration
class TestDeleteAccountAPI:
    """Test DELETE /api/user/delete."""

    def test_delete_account(self, client, auth_cookie, existing_user, user_service):
        response = client.request(
            "DELETE", "/api/user/delete", json={"password": "password123"}, headers=auth_cookie
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "User account deleted successfully"
        assert user_service.store.find_user(existing_user.id) is None
        assert user_service.store.find_profile(existing_user.id) is None

    def test_delete_account_wrong_password(self, client, auth_cookie, existing_user, user_service):
        response = client.request(
            "DELETE", "/api/user/delete", json={"password": "wrongpassword"}, headers=auth_cookie
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"error": "Invalid password"}
        assert user_service.store.find_user(existing_user.id) is not None

    def test_delete_account_missing_password(self, client, auth_cookie):
        response = client.request("DELETE", "/api/user/delete", json={}, headers=auth_cookie)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"]["password"] == ["Password is required"]


@pytest.mark.integration
class TestSavedItemsAPI:
    """Test saved tips and resources."""

    @pytest.mark.parametrize(
        "path,id_field,list_key,label",
        [
            ("/api/user/saved-tips", "tipId", "savedTips", "Tip"),
            ("/api/user/saved-resources", "resourceId", "savedResources", "Resource"),
        ],
    )
    def test_save_list_remove(self, client, auth_cookie, path, id_field, list_key, label):
        response = client.post(path, json={id_field: "item-1"}, headers=auth_cookie)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == f"{label} saved successfully"

        items = client.get(path, headers=auth_cookie).json()[list_key]
        assert [item["id"] for item in items] == ["item-1"]
        assert "savedAt" in items[0]

        response = client.post(path, json={id_field: "item-1"}, headers=auth_cookie)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": f"{label} already saved"}

        response = client.delete(path, params={id_field: "item-1"}, headers=auth_cookie)
        assert response.status_code == status.HTTP_200_OK
        assert client.get(path, headers=auth_cookie).json()[list_key] == []

    def test_tips_and_resources_are_separate(self, client, auth_cookie):
        client.post("/api/user/saved-tips", json={"tipId": "x"}, headers=auth_cookie)
        resources = client.get("/api/user/saved-resources", headers=auth_cookie).json()["savedResources"]
        assert resources == []

    def test_missing_id(self, client, auth_cookie):
        response = client.post("/api/user/saved-tips", json={}, headers=auth_cookie)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Tip ID is required"}

        response = client.delete("/api/user/saved-resources", headers=auth_cookie)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Resource ID is required"}

    def test_remove_unknown(self, client, auth_cookie):
        response = client.delete("/api/user/saved-tips", params={"tipId": "nope"}, headers=auth_cookie)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Tip not found in saved tips"}

    def test_requires_auth(self, client):
        assert client.get("/api/user/saved-tips").status_code == status.HTTP_401_UNAUTHORIZED
        assert client.post("/api/user/saved-resources", json={"resourceId": "r"}).status_code == 401

    def test_saved_items_survive_profile_update(self, client, auth_cookie):
        client.post("/api/user/saved-tips", json={"tipId": "t1"}, headers=auth_cookie)
        client.put("/api/user/profile", json={"firstName": "Grace"}, headers=auth_cookie)
        tips = client.get("/api/user/saved-tips", headers=auth_cookie).json()["savedTips"]
        assert [tip["id"] for tip in tips] == ["t1"]


@pytest.mark.integration
class TestHealth:
    """Test the health endpoint."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"


@pytest.mark.integration
class TestCreateUserAPI:
    """Test POST /api/user/create."""

    body = {"firstName": "Ada", "lastName": "Lovelace", "email": "Ada@Example.com", "password": "Passw0rd!"}

    def test_create_user(self, client):
        response = client.post("/api/user/create", json=self.body)
        assert response.status_code == status.HTTP_200_OK
        user = response.json()["user"]
        assert user["firstName"] == "Ada"
        assert user["lastName"] == "Lovelace"
        assert user["email"] == "ada@example.com"
        assert "createdAt" in user
        assert "password" not in user
        assert "set-cookie" not in response.headers

    def test_create_user_conflict(self, client, existing_user):
        response = client.post("/api/user/create", json={**self.body, "email": "test@example.com"})
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {"error": "Email already registered"}

    def test_create_user_validation(self, client):
        response = client.post("/api/user/create", json={**self.body, "password": "weak"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "password" in response.json()["errors"]


@pytest.mark.integration
class TestProfileInputHandling:
    """Test strict date input and tolerant reads of stored profiles."""

    def test_numeric_date_of_birth_rejected(self, client, auth_cookie):
        response = client.put("/api/user/profile", json={"dateOfBirth": 0}, headers=auth_cookie)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"]["dateOfBirth"] == ["Invalid date format"]

    def test_null_date_of_birth_clears(self, client, auth_cookie):
        client.put("/api/user/profile", json={"dateOfBirth": "1990-01-01"}, headers=auth_cookie)
        response = client.put("/api/user/profile", json={"dateOfBirth": None}, headers=auth_cookie)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["profile"]["dateOfBirth"] is None

    def test_unreadable_stored_date_of_birth(self, client, auth_cookie, existing_user, user_service):
        path = user_service.store.profiles_dir / f"{existing_user.id}.yaml"
        data = yaml.safe_load(path.read_text())
        data["date_of_birth"] = "zz:yy"
        path.write_text(yaml.safe_dump(data))

        response = client.get("/api/user/profile", headers=auth_cookie)
        assert response.status_code == status.HTTP_200_OK
        profile = response.json()["profile"]
        assert profile["dateOfBirth"] is None
        assert profile["firstName"] == "Test"
