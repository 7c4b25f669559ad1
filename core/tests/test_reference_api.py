from datetime import date

import pytest
from django.urls import reverse

from core.models import Center, Consultation, PlanningRecord, Specialty, SpecialtyActivity, User
from core.services.reference import cached_specialties

pytestmark = pytest.mark.django_db


def test_readonly_user_can_read_reference_data(readonly_client, reference):
    for name in ('centers', 'specialties', 'activities', 'consultations'):
        r = readonly_client.get(reverse(name))
        assert r.status_code == 200, name
        assert r.data['ok'] is True


def test_readonly_user_cannot_write_reference_data(readonly_client, reference):
    r = readonly_client.post(reverse('centers'), {'name': 'Centro Sur'}, format='json')
    assert r.status_code == 403
    r = readonly_client.delete(reverse('specialty_detail', args=[reference['med'].id]))
    assert r.status_code == 403
    assert Specialty.objects.filter(pk=reference['med'].id).exists()


def test_center_crud(admin_client):
    r = admin_client.post(reverse('centers'), {'name': 'Centro <b>Sur</b>', 'address': 'Calle 2'}, format='json')
    assert r.status_code == 201
    center_id = r.data['data']['id']
    assert r.data['data']['name'] == 'Centro Sur'

    r = admin_client.put(reverse('center_detail', args=[center_id]), {'address': 'Calle 3'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['address'] == 'Calle 3'
    assert r.data['data']['name'] == 'Centro Sur'

    dup = admin_client.post(reverse('centers'), {'name': 'centro sur'}, format='json')
    assert dup.status_code == 400

    r = admin_client.delete(reverse('center_detail', args=[center_id]))
    assert r.status_code == 200
    assert not Center.objects.filter(pk=center_id).exists()


def test_free_text_is_stored_as_plain_text(admin_client):
    r = admin_client.post(reverse('activities'), {
        'name': 'Curas & <a href="http://x">vendajes</a>',
        'description': '<i>Heridas</i> < 5 cm',
    }, format='json')
    assert r.status_code == 201
    assert r.data['data']['name'] == 'Curas & vendajes'
    assert r.data['data']['description'] == 'Heridas < 5 cm'


def test_missing_row_is_404(admin_client):
    r = admin_client.get(reverse('center_detail', args=[999]))
    assert r.status_code == 404
    assert r.data['error']['code'] == 'not_found'


def test_specialty_writes_refresh_cached_list(admin_client, reference):
    assert [s['code'] for s in cached_specialties()] == ['ENF', 'MED']
    r = admin_client.post(reverse('specialties'), {'name': 'Pediatría', 'code': 'ped'}, format='json')
    assert r.status_code == 201
    assert r.data['data']['code'] == 'PED'
    assert [s['code'] for s in cached_specialties()] == ['ENF', 'MED', 'PED']

    dup = admin_client.post(reverse('specialties'), {'name': 'Otra', 'code': 'ENF'}, format='json')
    assert dup.status_code == 400


def test_specialty_activities_set_is_replaced(admin_client, reference):
    url = reverse('specialty_activities', args=[reference['enf'].id])
    r = admin_client.get(url)
    assert {a['name'] for a in r.data['data']} == {'Consulta', 'Curas'}

    r = admin_client.post(url, {'activityIds': [reference['curas'].id]}, format='json')
    assert r.status_code == 200
    assert [a['id'] for a in r.data['data']] == [reference['curas'].id]
    assert SpecialtyActivity.objects.filter(specialty=reference['enf']).count() == 1

    bad = admin_client.post(url, {'activityIds': [12345]}, format='json')
    assert bad.status_code == 400


def test_consultation_filters(admin_client, reference):
    other = Center.objects.create(name='Centro Sur')
    Consultation.objects.create(consultation_number='2', specialty=reference['med'], center=other)
    r = admin_client.get(reverse('consultations'), {'specialtyId': reference['enf'].id})
    assert [c['consultationNumber'] for c in r.data['data']] == ['1']
    r = admin_client.get(reverse('consultations'), {'centerId': other.id})
    assert [c['consultationNumber'] for c in r.data['data']] == ['2']


def test_consultation_number_unique_per_center(admin_client, reference):
    r = admin_client.post(reverse('consultations'), {
        'consultationNumber': '1', 'centerId': reference['center'].id,
    }, format='json')
    assert r.status_code == 400


def test_deleting_referenced_rows_conflicts(admin_client, reference, staff):
    PlanningRecord.objects.create(
        user=staff['nurse'], specialty=reference['enf'], activity=reference['consulta'],
        center=reference['center'], record_date=date(2024, 3, 5), shift='morning',
    )
    for name, obj in (('specialty_detail', reference['enf']), ('activity_detail', reference['consulta']),
                      ('center_detail', reference['center'])):
        r = admin_client.delete(reverse(name, args=[obj.id]))
        assert r.status_code == 409, name
        assert r.data['error']['code'] == 'conflict'
    assert PlanningRecord.objects.count() == 1


def test_user_management(admin_client, reference):
    r = admin_client.post(reverse('users'), {
        'fullName': 'Marta Gómez', 'email': 'marta@example.com',
        'specialtyId': reference['enf'].id, 'consultationId': reference['room'].id,
    }, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['hasAccess'] is False
    assert data['role'] == User.ROLE_READONLY
    user_id = data['id']

    r = admin_client.put(reverse('user_detail', args=[user_id]), {'isActive': False}, format='json')
    assert r.status_code == 200
    assert r.data['data']['isActive'] is False

    r = admin_client.put(reverse('user_detail', args=[user_id]), {'specialtyId': 999}, format='json')
    assert r.status_code == 400


def test_users_list_is_admin_only(readonly_client):
    assert readonly_client.get(reverse('users')).status_code == 403


def test_active_users_filter_by_specialty(readonly_client, reference, staff):
    staff['doctor'].is_active = False
    staff['doctor'].save()
    r = readonly_client.get(reverse('active_users'), {'specialtyId': reference['enf'].id})
    assert r.status_code == 200
    assert [u['id'] for u in r.data['data']] == [staff['nurse'].id]
