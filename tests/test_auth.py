from sqlmodel import Session

from storefront.auth.auth import TOKEN_COOKIE
from storefront.enums.user_role import UserRole
from storefront.services import user_service
from tests.conftest import PASSWORD, bearer, make_user


class TestLoginPages:
    def test_login_page_renders(self, client):
        response = client.get("/login")
        assert response.status_code == 200
        assert "Login" in response.text

    def test_login_sets_cookie_and_redirects(self, client, user):
        response = client.post(
            "/login",
            data={"username": user.username, "password": PASSWORD},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/products"
        assert TOKEN_COOKIE in response.cookies

    def test_login_honours_relative_next(self, client, user):
        response = client.post(
            "/login",
            data={"username": user.username, "password": PASSWORD, "next": "/cart"},
            follow_redirects=False,
        )
        assert response.headers["location"] == "/cart"

    def test_login_ignores_external_next(self, client, user):
        response = client.post(
            "/login",
            data={"username": user.username, "password": PASSWORD, "next": "https://evil.example.com"},
            follow_redirects=False,
        )
        assert response.headers["location"] == "/products"

    def test_wrong_password_rerenders_form(self, client, user):
        response = client.post("/login", data={"username": user.username, "password": "nope"})
        assert response.status_code == 401
        assert "Invalid username or password" in response.text

    def test_inactive_user_cannot_log_in(self, client, session: Session):
        make_user(session, "ghost", is_active=False)
        response = client.post("/login", data={"username": "ghost", "password": PASSWORD})
        assert response.status_code == 401
        assert "deactivated" in response.text

    def test_logout_clears_cookie(self, user_client):
        response = user_client.post("/logout", follow_redirects=False)
        assert response.status_code == 303
        assert 'access_token=""' in response.headers["set-cookie"] or "Max-Age=0" in response.headers["set-cookie"]


class TestRegistration:
    def test_register_creates_user(self, client, session: Session):
        response = client.post(
            "/register",
            data={"username": "carol", "email": "Carol@Example.com", "password": "secret1"},
            follow_redirects=False,
        )
        assert response.status_code == 303
        assert response.headers["location"].startswith("/login")

        user = user_service.find_by_username(session, "carol")
        assert user is not None
        assert user.email == "carol@example.com"
        assert user.role == UserRole.USER
        assert user.password_hash != "secret1"
        assert user_service.verify_password("secret1", user.password_hash)

    def test_duplicate_username_is_rejected(self, client, user):
        response = client.post(
            "/register",
            data={"username": user.username, "email": "new@example.com", "password": "secret1"},
        )
        assert response.status_code == 400
        assert "Username is already taken" in response.text

    def test_duplicate_email_is_rejected(self, client, user):
        response = client.post(
            "/register",
            data={"username": "someone", "email": user.email, "password": "secret1"},
        )
        assert response.status_code == 400
        assert "Email is already registered" in response.text

    def test_short_password_is_rejected(self, client, session: Session):
        response = client.post(
            "/register",
            data={"username": "dave", "email": "dave@example.com", "password": "123"},
        )
        assert response.status_code == 400
        assert "password" in response.text
        assert user_service.find_by_username(session, "dave") is None


class TestTokenApi:
    def test_token_and_me(self, client, user):
        response = client.post("/auth/token", json={"username": user.username, "password": PASSWORD})
        assert response.status_code == 200
        token = response.json()["token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["username"] == user.username
        assert "password_hash" not in me.json()

    def test_bad_credentials_return_json_401(self, client, user):
        response = client.post("/auth/token", json={"username": user.username, "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    def test_me_requires_token(self, client):
        response = client.get("/auth/me")
        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized access"

    def test_invalid_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    def test_bearer_helper_authenticates(self, client, user):
        response = client.get("/auth/me", headers=bearer(user))
        assert response.json()["id"] == user.id


class TestPageAuthentication:
    def test_anonymous_page_redirects_to_login(self, client):
        response = client.get("/cart", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "/login?next=%2Fcart"

    def test_deactivated_session_is_rejected(self, user_client, user, session: Session):
        user.is_active = False
        session.add(user)
        session.commit()

        response = user_client.get("/cart", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"].startswith("/login")
