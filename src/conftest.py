import secrets
import string
import typing as t
from pathlib import Path

import faker
import pytest
from django.core.cache import cache
from django.test.client import Client
from ninja_jwt.tokens import RefreshToken
from pytest import MonkeyPatch

from accounts.models import BoxofficeUser
from boxoffice.celery import app as celery_app


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits to allow testing."""
    for throttle in (
        "AuthThrottle",
        "AnonDefaultThrottle",
        "UserDefaultThrottle",
        "WriteThrottle",
        "PurchaseThrottle",
        "GateThrottle",
    ):
        monkeypatch.setattr(f"common.throttling.{throttle}.rate", "10000/min")


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any, monkeypatch: MonkeyPatch) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously.

    This ensures that Celery tasks run immediately in the same process,
    allowing tests to verify their side effects without a broker.
    """
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    monkeypatch.setattr(celery_app.conf, "task_always_eager", True)
    monkeypatch.setattr(celery_app.conf, "task_eager_propagates", True)


@pytest.fixture(autouse=True)
def media_root(settings: t.Any, tmp_path: Path) -> Path:
    """Rendered codes are written to a throwaway directory."""
    settings.MEDIA_ROOT = tmp_path / "media"
    return t.cast(Path, settings.MEDIA_ROOT)


class BoxofficeUserFactory:
    """Factory for creating BoxofficeUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> BoxofficeUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        return BoxofficeUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> BoxofficeUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> BoxofficeUserFactory:
    return BoxofficeUserFactory()


@pytest.fixture
def superuser(user_factory: BoxofficeUserFactory) -> BoxofficeUser:
    """A superuser."""
    return user_factory(is_superuser=True, is_staff=True, role=BoxofficeUser.Role.SUPER_ADMIN)


@pytest.fixture
def club_manager(user_factory: BoxofficeUserFactory) -> BoxofficeUser:
    return user_factory(role=BoxofficeUser.Role.CLUB_MANAGER)


@pytest.fixture
def gatekeeper(user_factory: BoxofficeUserFactory) -> BoxofficeUser:
    return user_factory(role=BoxofficeUser.Role.GATEKEEPER)


@pytest.fixture
def other_gatekeeper(user_factory: BoxofficeUserFactory) -> BoxofficeUser:
    return user_factory(role=BoxofficeUser.Role.GATEKEEPER)


@pytest.fixture
def supporter(user_factory: BoxofficeUserFactory) -> BoxofficeUser:
    return user_factory(role=BoxofficeUser.Role.SUPPORTER, phone_number="+221771234567")


def _client_for(user: BoxofficeUser) -> Client:
    refresh = RefreshToken.for_user(user)
    return Client(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")  # type: ignore[attr-defined]


@pytest.fixture
def manager_client(club_manager: BoxofficeUser) -> Client:
    """API client for a club manager."""
    return _client_for(club_manager)


@pytest.fixture
def gatekeeper_client(gatekeeper: BoxofficeUser) -> Client:
    """API client for a gatekeeper."""
    return _client_for(gatekeeper)


@pytest.fixture
def supporter_client(supporter: BoxofficeUser) -> Client:
    """API client for a supporter."""
    return _client_for(supporter)
