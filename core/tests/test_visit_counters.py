import pytest
from django.urls import reverse

from core.models import Consultation

pytestmark = pytest.mark.django_db


@pytest.fixture
def rooms(reference):
    c = reference['center']
    return [
        reference['room'],
        Consultation.objects.create(consultation_number='2', specialty=reference['enf'], center=c),
        Consultation.objects.create(consultation_number='3', specialty=reference['med'], center=c),
        Consultation.objects.create(consultation_number='4', center=c),
    ]


def test_counters_grouped_by_specialty(readonly_client, rooms):
    r = readonly_client.get(reverse('visit_counters'))
    assert r.status_code == 200
    groups = r.data['data']
    assert [g['specialtyCode'] for g in groups] == ['ENF', 'MED', None]
    assert [c['consultationNumber'] for c in groups[0]['consultations']] == ['1', '2']
    assert groups[0]['activeCount'] == 2


def test_toggle_one_counter(admin_client, rooms):
    url = reverse('visit_counter_toggle', args=[rooms[0].id])
    r = admin_client.post(url)
    assert r.status_code == 200
    assert r.data['data']['isActive'] is False
    r = admin_client.post(url)
    assert r.data['data']['isActive'] is True


def test_switch_whole_specialty(admin_client, reference, rooms):
    r = admin_client.post(reverse('visit_counters_specialty'),
                          {'specialtyId': reference['enf'].id, 'isActive': False}, format='json')
    assert r.status_code == 200
    assert r.data['updated'] == 2
    assert list(Consultation.objects.filter(is_active=True).values_list('consultation_number', flat=True)
                .order_by('consultation_number')) == ['3', '4']


def test_toggle_is_admin_only(readonly_client, rooms):
    assert readonly_client.post(reverse('visit_counter_toggle', args=[rooms[0].id])).status_code == 403
