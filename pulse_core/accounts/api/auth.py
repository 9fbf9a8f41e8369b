# pulse_core/accounts/api/auth.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from pulse_core.accounts.api.serializers import (
    DetailResponseSerializer,
    LoginRequestSerializer,
    LoginResponseSerializer,
    UserSerializer,
)
from pulse_core.accounts.selectors import username_for_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthCookies:
    """
    HttpOnly cookie pair mirroring the JWT pair, so browser clients never
    handle tokens in JS. Names and flags come from SIMPLE_JWT.
    """
    access_name: str
    refresh_name: str
    access_max_age: int
    refresh_max_age: int
    secure: bool
    samesite: str

    @classmethod
    def from_settings(cls) -> "AuthCookies":
        cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
        return cls(
            access_name=cfg.get("AUTH_COOKIE", "pulse_access"),
            refresh_name=cfg.get("AUTH_COOKIE_REFRESH", "pulse_refresh"),
            access_max_age=int(cfg.get("ACCESS_TOKEN_LIFETIME", timedelta(minutes=30)).total_seconds()),
            refresh_max_age=int(cfg.get("REFRESH_TOKEN_LIFETIME", timedelta(days=7)).total_seconds()),
            secure=bool(cfg.get("AUTH_COOKIE_SECURE", False)),
            samesite=cfg.get("AUTH_COOKIE_SAMESITE", "Lax"),
        )

    def attach(self, response: Response, *, access: str, refresh: str | None = None) -> None:
        pairs = [(self.access_name, access, self.access_max_age)]
        if refresh:
            pairs.append((self.refresh_name, refresh, self.refresh_max_age))
        for name, value, max_age in pairs:
            response.set_cookie(
                name,
                value,
                max_age=max_age,
                httponly=True,
                secure=self.secure,
                samesite=self.samesite,
                path="/",
            )

    def clear(self, response: Response) -> None:
        response.delete_cookie(self.access_name, path="/")
        response.delete_cookie(self.refresh_name, path="/")


class LoginView(APIView):
    """Username or email + password -> JWT pair in the body and in cookies."""

    permission_classes = [AllowAny]

    @extend_schema(request=LoginRequestSerializer, responses={200: LoginResponseSerializer}, tags=["Auth"])
    def post(self, request):
        creds = LoginRequestSerializer(data=request.data)
        creds.is_valid(raise_exception=True)
        username = creds.validated_data.get("username")
        if not username:
            # Unknown or shared emails fall through to a normal 401
            email = creds.validated_data["email"]
            username = username_for_email(email) or email

        ser = TokenObtainPairSerializer(data={"username": username, "password": creds.validated_data["password"]})
        ser.is_valid(raise_exception=True)
        tokens = ser.validated_data

        res = Response(
            {"access": tokens["access"], "refresh": tokens["refresh"], "user": UserSerializer(ser.user).data},
            status=status.HTTP_200_OK,
        )
        AuthCookies.from_settings().attach(res, access=tokens["access"], refresh=tokens["refresh"])
        logger.info("User %s logged in", ser.user.pk)
        return res


class RefreshView(APIView):
    """Refresh token from the body, or from the refresh cookie."""

    permission_classes = [AllowAny]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        cookies = AuthCookies.from_settings()
        refresh = request.data.get("refresh") or request.COOKIES.get(cookies.refresh_name)

        ser = TokenRefreshSerializer(data={"refresh": refresh})
        ser.is_valid(raise_exception=True)

        res = Response({"detail": "refreshed", "access": ser.validated_data["access"]}, status=status.HTTP_200_OK)
        # rotated only when ROTATE_REFRESH_TOKENS is on
        cookies.attach(res, access=ser.validated_data["access"], refresh=ser.validated_data.get("refresh"))
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        res = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        AuthCookies.from_settings().clear(res)
        return res
