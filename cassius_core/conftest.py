# cassius_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from cassius_core.iam.models import MembershipRole, TenantMembership
from cassius_core.tenants.models import Tenant


def scope_headers(tenant):
    """
    Scope header used by the scope resolver.
    DRF test client requires HTTP_ prefix.
    """
    return {"HTTP_X_TENANT_ID": str(tenant.id)}


@pytest.fixture
def tenant(db):
    return Tenant.objects.create(code="test-clinic", name="Test Clinic")


@pytest.fixture
def other_tenant(db):
    return Tenant.objects.create(code="other-clinic", name="Other Clinic")


@pytest.fixture
def user(db, tenant):
    """
    Surgeon with an active membership in `tenant`.
    """
    User = get_user_model()
    user = User.objects.create_user(
        username="dr.test",
        password="testpass",
        first_name="Alice",
        last_name="Martin",
        is_active=True,
    )
    TenantMembership.objects.create(
        tenant=tenant,
        user=user,
        role=MembershipRole.CHIRURGIEN,
        is_active=True,
    )
    return user


@pytest.fixture
def api_client(user):
    c = APIClient()
    c.force_authenticate(user=user)
    return c
