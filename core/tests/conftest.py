import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from core.models import Activity, Center, Consultation, Specialty, SpecialtyActivity, User


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters and the specialty list live in the locmem cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin1', email='admin1@example.com', password='P@ssw0rd1',
        full_name='Ana Admin', role=User.ROLE_ADMIN,
    )


@pytest.fixture
def readonly_user(db):
    return User.objects.create_user(
        username='lector1', email='lector1@example.com', password='P@ssw0rd1',
        full_name='Luis Lector', role=User.ROLE_READONLY,
    )


def client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def readonly_client(readonly_user):
    return client_for(readonly_user)


@pytest.fixture
def reference(db):
    """Two specialties, one center, a room and linked activities."""
    center = Center.objects.create(name='Centro Norte', address='Calle Mayor 1')
    enf = Specialty.objects.create(name='Enfermería', code='ENF')
    med = Specialty.objects.create(name='Medicina', code='MED')
    consulta = Activity.objects.create(name='Consulta')
    curas = Activity.objects.create(name='Curas')
    SpecialtyActivity.objects.create(specialty=enf, activity=consulta)
    SpecialtyActivity.objects.create(specialty=enf, activity=curas)
    room = Consultation.objects.create(consultation_number='1', extension='101', specialty=enf, center=center)
    return {
        'center': center, 'enf': enf, 'med': med,
        'consulta': consulta, 'curas': curas, 'room': room,
    }


@pytest.fixture
def staff(db, reference):
    """Two schedulable staff rows without login access."""
    nurse = User.objects.create_user(username='nurse1', email='nurse1@example.com',
                                     full_name='Nuria Enfermera', specialty=reference['enf'])
    doctor = User.objects.create_user(username='doc1', email='doc1@example.com',
                                      full_name='Diego Médico', specialty=reference['med'])
    return {'nurse': nurse, 'doctor': doctor}
