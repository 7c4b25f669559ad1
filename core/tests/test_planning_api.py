"""
Integration tests for the planning endpoints.

These exercise the render pass through the HTTP layer: view modes,
filters, the absence toggle, store failures, bulk registration and
record editing.
"""
from datetime import date

import pytest
from django.db import DatabaseError
from django.urls import reverse
from django_redis.exceptions import ConnectionInterrupted
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from core.models import Activity, Center, PlanningRecord, Specialty, SpecialtyActivity, User, UserAbsence
from core.services import planning as planning_service
from core.services import reference as reference_service


class PlanningAPITests(APITestCase):
    def setUp(self) -> None:
        self.center = Center.objects.create(name='Centro Norte')
        self.enf = Specialty.objects.create(name='Enfermería', code='ENF')
        self.med = Specialty.objects.create(name='Medicina', code='MED')
        self.consulta = Activity.objects.create(name='Consulta')
        self.curas = Activity.objects.create(name='Curas')
        SpecialtyActivity.objects.create(specialty=self.enf, activity=self.consulta)

        self.admin = User.objects.create_user(username='admin1', email='admin1@example.com',
                                              password='P@ssw0rd1', role=User.ROLE_ADMIN)
        self.reader = User.objects.create_user(username='lector1', email='lector1@example.com',
                                               password='P@ssw0rd1', role=User.ROLE_READONLY)
        self.nurse = User.objects.create_user(username='nurse1', email='nurse1@example.com',
                                              full_name='Nuria', specialty=self.enf)
        self.doctor = User.objects.create_user(username='doc1', email='doc1@example.com',
                                               full_name='Diego', specialty=self.med)

        # week of 2024-03-04 .. 2024-03-10
        self.r1 = self.record(self.nurse, self.enf, date(2024, 3, 4), 'morning')
        self.r2 = self.record(self.nurse, self.enf, date(2024, 3, 5), 'afternoon')
        self.r3 = self.record(self.doctor, self.med, date(2024, 3, 7), 'morning')
        UserAbsence.objects.create(user=self.nurse, start_date=date(2024, 3, 4), end_date=date(2024, 3, 5))

    def record(self, user, specialty, day, shift):
        return PlanningRecord.objects.create(
            user=user, specialty=specialty, activity=self.consulta, center=self.center,
            record_date=day, shift=shift,
        )

    def authenticate(self, user: User) -> APIClient:
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def get_planning(self, user=None, **params):
        return self.authenticate(user or self.reader).get(reverse('planning'), params)

    def test_weekly_grid(self):
        r = self.get_planning(view='weekly', date='2024-03-06')
        self.assertEqual(r.status_code, status.HTTP_200_OK)
        self.assertEqual((r.data['start'], r.data['end']), ('2024-03-04', '2024-03-10'))
        grid = r.data['grid']
        self.assertEqual(len(grid['days']), 7)
        self.assertEqual([s['shift'] for s in grid['sections']], ['morning', 'afternoon'])
        morning = {row['code']: row['cells'] for row in grid['sections'][0]['rows']}
        self.assertEqual(list(morning), ['ENF', 'MED'])
        self.assertEqual([item['id'] for item in morning['ENF'][0]], [self.r1.id])
        self.assertEqual([item['id'] for item in morning['MED'][3]], [self.r3.id])
        self.assertEqual(r.data['absentCount'], 2)
        self.assertTrue(morning['ENF'][0][0]['isAbsent'])
        self.assertFalse(morning['MED'][3][0]['isAbsent'])

    def test_hide_absences(self):
        r = self.get_planning(view='weekly', date='2024-03-06', showAbsences='false')
        self.assertEqual(r.data['absentCount'], 0)
        ids = [item['id'] for s in r.data['grid']['sections'] for row in s['rows']
               for cell in row['cells'] for item in cell]
        self.assertEqual(ids, [self.r3.id])

    def test_daily_and_monthly_ranges(self):
        r = self.get_planning(view='daily', date='2024-03-05')
        self.assertEqual(r.data['grid']['days'], ['2024-03-05'])
        r = self.get_planning(view='monthly', date='2024-02-29')
        self.assertEqual((r.data['start'], r.data['end']), ('2024-02-01', '2024-02-29'))
        self.assertEqual(len(r.data['grid']['days']), 29)

    def test_specialty_filter_keeps_only_that_row(self):
        r = self.get_planning(view='weekly', date='2024-03-06', specialtyId=self.med.id)
        morning = r.data['grid']['sections'][0]['rows']
        self.assertEqual([row['code'] for row in morning], ['MED'])
        self.assertEqual([u['id'] for u in r.data['users']], [self.doctor.id])

    def test_user_filter(self):
        r = self.get_planning(view='weekly', date='2024-03-06', userId=self.doctor.id)
        ids = [item['id'] for s in r.data['grid']['sections'] for row in s['rows']
               for cell in row['cells'] for item in cell]
        self.assertEqual(ids, [self.r3.id])

    def test_invalid_query_is_400(self):
        self.assertEqual(self.get_planning(view='fortnightly').status_code, 400)
        self.assertEqual(self.get_planning(date='2024-13-01').status_code, 400)

    def test_store_failure_is_503_with_retry(self):
        def boom(*args, **kwargs):
            raise DatabaseError('connection lost')

        original = planning_service.list_assignment_records
        planning_service.list_assignment_records = boom
        try:
            r = self.get_planning(view='weekly', date='2024-03-06')
        finally:
            planning_service.list_assignment_records = original
        self.assertEqual(r.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(r.data['ok'], False)
        self.assertEqual(r.data['error']['code'], 'store_unavailable')
        self.assertTrue(r.data['error']['retry'])
        self.assertNotIn('grid', r.data)

    def test_register_creates_one_record_per_day(self):
        client = self.authenticate(self.admin)
        r = client.post(reverse('planning_register'), {
            'startDate': '2024-04-01', 'endDate': '2024-04-05', 'userId': self.nurse.id,
            'specialtyId': self.enf.id, 'activityId': self.consulta.id, 'centerId': self.center.id,
            'shift': 'morning', 'notes': '<script>x</script>Turno',
        }, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['created'], 5)
        created = PlanningRecord.objects.filter(record_date__gte=date(2024, 4, 1)).order_by('record_date')
        self.assertEqual([rec.record_date.day for rec in created], [1, 2, 3, 4, 5])
        self.assertNotIn('<script>', created[0].notes)

    def test_register_rejects_reversed_range_and_unlinked_activity(self):
        client = self.authenticate(self.admin)
        base = {'userId': self.nurse.id, 'specialtyId': self.enf.id, 'centerId': self.center.id,
                'shift': 'morning'}
        r = client.post(reverse('planning_register'),
                        {**base, 'startDate': '2024-04-05', 'endDate': '2024-04-01', 'activityId': self.consulta.id},
                        format='json')
        self.assertEqual(r.status_code, 400)
        r = client.post(reverse('planning_register'),
                        {**base, 'startDate': '2024-04-01', 'endDate': '2024-04-01', 'activityId': self.curas.id},
                        format='json')
        self.assertEqual(r.status_code, 400)
        self.assertEqual(PlanningRecord.objects.count(), 3)

    def test_register_is_admin_only(self):
        r = self.authenticate(self.reader).post(reverse('planning_register'), {}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_records_list_update_delete(self):
        client = self.authenticate(self.admin)
        r = client.get(reverse('planning_records'), {'startDate': '2024-03-04', 'endDate': '2024-03-10',
                                                     'userId': self.nurse.id})
        self.assertEqual([rec['id'] for rec in r.data['data']], [self.r1.id, self.r2.id])

        url = reverse('planning_record_detail', args=[self.r2.id])
        r = client.put(url, {'shift': 'morning', 'recordDate': '2024-03-06'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual((r.data['data']['shift'], r.data['data']['recordDate']), ('morning', '2024-03-06'))

        self.assertEqual(self.authenticate(self.reader).delete(url).status_code, 403)
        self.assertEqual(client.delete(url).status_code, 200)
        self.assertFalse(PlanningRecord.objects.filter(pk=self.r2.id).exists())


pytestmark = pytest.mark.django_db


def test_absence_crud_and_validation(admin_client, staff):
    nurse = staff['nurse']
    r = admin_client.post(reverse('absences'), {
        'userId': nurse.id, 'startDate': '2024-03-01', 'endDate': '2024-03-05', 'reason': 'Vacaciones',
    }, format='json')
    assert r.status_code == 201
    absence_id = r.data['data']['id']

    bad = admin_client.post(reverse('absences'), {
        'userId': nurse.id, 'startDate': '2024-03-05', 'endDate': '2024-03-01',
    }, format='json')
    assert bad.status_code == 400

    # partial update that would reverse the interval
    r = admin_client.put(reverse('absence_detail', args=[absence_id]), {'endDate': '2024-02-01'}, format='json')
    assert r.status_code == 400

    r = admin_client.get(reverse('absences'), {'startDate': '2024-03-05', 'endDate': '2024-03-31'})
    assert [a['id'] for a in r.data['data']] == [absence_id]
    r = admin_client.get(reverse('absences'), {'startDate': '2024-03-06'})
    assert r.data['data'] == []

    assert admin_client.delete(reverse('absence_detail', args=[absence_id])).status_code == 200
    assert not UserAbsence.objects.exists()


def test_planning_defaults_to_weekly_today(readonly_client, reference):
    r = readonly_client.get(reverse('planning'))
    assert r.status_code == 200
    assert r.data['view'] == 'weekly'
    assert len(r.data['grid']['days']) == 7
    assert r.data['filters']['showAbsences'] is True


def test_cache_outage_is_503_with_retry(readonly_client, reference, monkeypatch):
    class DownCache:
        def get(self, key, default=None):
            raise ConnectionInterrupted(connection=None)

    monkeypatch.setattr(reference_service, 'cache', DownCache())
    r = readonly_client.get(reverse('planning'), {'view': 'daily', 'date': '2024-03-06'})
    assert r.status_code == 503
    assert r.data['error']['code'] == 'store_unavailable'
    assert r.data['error']['retry'] is True
