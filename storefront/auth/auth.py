import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import APIRouter, Depends, Form, Request, status
from pydantic import ValidationError
from sqlmodel import Session

from storefront.configuration.settings import Configuration
from storefront.core.exceptions.app_exception import AppHttpException
from storefront.core.templates import redirect, render, safe_next
from storefront.database.connection import get_session
from storefront.models.user import User
from storefront.schemas.auth import AuthCredentials, RegisterRequest, Token
from storefront.schemas.user import UserResponse
from storefront.services import cart_service, user_service

configuration = Configuration()

SECRET_KEY = configuration.secret_key
JWT_ALGORITHM = "HS256"
JWT_EXPIRATION_HOURS = configuration.jwt_expiration_hours
TOKEN_COOKIE = "access_token"

db_session = get_session


class AuthRouter(APIRouter):
    def __init__(self):
        super().__init__()
        self.add_api_route("/login", self.login_page, methods=["GET"], include_in_schema=False)
        self.add_api_route("/login", self.login_form, methods=["POST"], include_in_schema=False)
        self.add_api_route("/register", self.register_page, methods=["GET"], include_in_schema=False)
        self.add_api_route("/register", self.register_form, methods=["POST"], include_in_schema=False)
        self.add_api_route("/logout", self.logout, methods=["POST"], include_in_schema=False)
        self.add_api_route("/auth/token", self.login, methods=["POST"], response_model=Token)
        self.add_api_route("/auth/me", self.me, methods=["GET"], response_model=UserResponse)

    def _generate_jwt(self, user_id: int) -> str:
        expiration = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRATION_HOURS)
        payload = {"user_id": user_id, "exp": expiration}
        return jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)

    def decode_jwt(self, token: str) -> dict:
        try:
            return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AppHttpException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
        except jwt.InvalidTokenError:
            raise AppHttpException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    def _read_token(self, request: Request) -> Optional[str]:
        authorization = request.headers.get("Authorization")
        if authorization:
            parts = authorization.split()
            if len(parts) != 2 or parts[0].lower() != "bearer":
                raise AppHttpException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication format")
            return parts[1]
        return request.cookies.get(TOKEN_COOKIE)

    def _attach(self, request: Request, user: User, session: Session) -> User:
        # Shared with the templates: navbar user and cart badge
        request.state.user = user
        request.state.cart_count = cart_service.get_cart_item_count(session, user)
        return user

    def get_current_user(self, request: Request, session: Session = Depends(db_session)) -> User:
        token = self._read_token(request)
        if not token:
            raise AppHttpException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized access")

        payload = self.decode_jwt(token)
        user = session.get(User, payload.get("user_id"))

        if not user or not user.is_active:
            raise AppHttpException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")
        return self._attach(request, user, session)

    def get_optional_user(self, request: Request, session: Session = Depends(db_session)) -> Optional[User]:
        try:
            return self.get_current_user(request, session)
        except AppHttpException:
            return None

    def _set_cookie(self, response, token: str):
        response.set_cookie(
            TOKEN_COOKIE,
            token,
            max_age=JWT_EXPIRATION_HOURS * 3600,
            httponly=True,
            samesite="lax",
            secure=configuration.is_production,
        )
        return response

    def login(self, credentials: AuthCredentials, session: Session = Depends(db_session)):
        user = user_service.authenticate(session, credentials.username, credentials.password)
        return Token(token=self._generate_jwt(user.id))

    def me(self, request: Request, session: Session = Depends(db_session)):
        user = self.get_current_user(request, session)
        return UserResponse.model_validate(user)

    def login_page(self, request: Request, next: Optional[str] = None):
        return render(request, "login.html", {"next": safe_next(next)})

    def login_form(
        self,
        request: Request,
        username: str = Form(...),
        password: str = Form(...),
        next: Optional[str] = Form(None),
        session: Session = Depends(db_session),
    ):
        try:
            user = user_service.authenticate(session, username, password)
        except AppHttpException as e:
            return render(request, "login.html", {"error": e.detail, "username": username, "next": safe_next(next)}, status_code=e.status_code)

        logging.info(f"AUTH >>> {user.username} logged in")
        response = redirect(safe_next(next))
        return self._set_cookie(response, self._generate_jwt(user.id))

    def register_page(self, request: Request):
        return render(request, "register.html", {"form": {}})

    def register_form(
        self,
        request: Request,
        username: str = Form(...),
        email: str = Form(...),
        password: str = Form(...),
        first_name: Optional[str] = Form(None),
        last_name: Optional[str] = Form(None),
        session: Session = Depends(db_session),
    ):
        form = {"username": username, "email": email, "first_name": first_name, "last_name": last_name}
        try:
            data = RegisterRequest(**form, password=password)
            user_service.register_user(session, data)
        except ValidationError as e:
            messages = "; ".join(f"{err['loc'][-1]}: {err['msg']}" for err in e.errors())
            return render(request, "register.html", {"error": messages, "form": form}, status_code=status.HTTP_400_BAD_REQUEST)
        except AppHttpException as e:
            return render(request, "register.html", {"error": e.detail, "form": form}, status_code=e.status_code)

        return redirect("/login", success="Registration successful! Please log in.")

    def logout(self):
        response = redirect("/products", success="You have been logged out")
        response.delete_cookie(TOKEN_COOKIE)
        return response


auth_router = AuthRouter()
get_current_user = auth_router.get_current_user
get_optional_user = auth_router.get_optional_user
