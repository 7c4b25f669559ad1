"""
Management command to populate the database with demo planning data.
"""
from datetime import timedelta
import random

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from core.models import (
    Activity, Center, Consultation, PlanningRecord, Specialty, SpecialtyActivity, User, UserAbsence,
)
from core.services.reference import invalidate_reference_cache

SPECIALTIES = [
    ('ENF', 'Enfermería'),
    ('MED', 'Medicina de Familia'),
    ('PED', 'Pediatría'),
    ('ODO', 'Odontología'),
]

ACTIVITIES = {
    'ENF': ['Consulta programada', 'Extracciones', 'Curas'],
    'MED': ['Consulta programada', 'Urgencias', 'Domicilios'],
    'PED': ['Consulta programada', 'Vacunación'],
    'ODO': ['Consulta programada'],
}

CENTERS = [('Centro de Salud Norte', 'Calle Mayor 1'), ('Centro de Salud Sur', 'Avenida del Parque 22')]


class Command(BaseCommand):
    help = 'Populate the database with demo centers, staff and a few weeks of planning'

    def add_arguments(self, parser):
        parser.add_argument('--weeks', type=int, default=4)
        parser.add_argument('--staff', type=int, default=3, help='staff members per specialty')
        parser.add_argument('--seed', type=int, default=None)

    @transaction.atomic
    def handle(self, *args, **options):
        rng = random.Random(options['seed'])
        centers = [Center.objects.get_or_create(name=n, defaults={'address': a})[0] for n, a in CENTERS]
        activities = {}
        specialties = []
        for code, name in SPECIALTIES:
            specialty, _ = Specialty.objects.get_or_create(code=code, defaults={'name': name})
            specialties.append(specialty)
            for activity_name in ACTIVITIES[code]:
                activity, _ = Activity.objects.get_or_create(name=activity_name)
                SpecialtyActivity.objects.get_or_create(specialty=specialty, activity=activity)
                activities.setdefault(code, []).append(activity)

        staff = []
        for specialty in specialties:
            for n in range(1, options['staff'] + 1):
                center = centers[n % len(centers)]
                room, _ = Consultation.objects.get_or_create(
                    center=center, consultation_number=f'{specialty.code}{n}',
                    defaults={'specialty': specialty, 'extension': f'{n:03d}'},
                )
                email = f'{specialty.code.lower()}{n}@medplan.local'
                user, created = User.objects.get_or_create(
                    email=email,
                    defaults={'username': email.split('@')[0], 'full_name': f'{specialty.name} {n}',
                              'specialty': specialty, 'consultation': room},
                )
                if created:
                    user.set_unusable_password()
                    user.save(update_fields=['password'])
                staff.append((user, specialty, room))
        self.stdout.write(f'{len(staff)} staff members ready')

        today = timezone.localdate()
        monday = today - timedelta(days=today.weekday())
        records = []
        for week in range(options['weeks']):
            for weekday in range(5):
                day = monday + timedelta(days=7 * week + weekday)
                for user, specialty, room in staff:
                    shift = rng.choice(PlanningRecord.SHIFT_CHOICES)[0]
                    records.append(PlanningRecord(
                        user=user, specialty=specialty, activity=rng.choice(activities[specialty.code]),
                        center=room.center, consultation=room, record_date=day, shift=shift,
                    ))
        PlanningRecord.objects.bulk_create(records)

        absences = 0
        for user, _, _ in rng.sample(staff, k=min(2, len(staff))):
            start = monday + timedelta(days=rng.randrange(0, 7 * max(options['weeks'], 1)))
            UserAbsence.objects.create(user=user, start_date=start, end_date=start + timedelta(days=2),
                                       reason='Vacaciones')
            absences += 1

        invalidate_reference_cache()
        self.stdout.write(self.style.SUCCESS(f'Created {len(records)} planning records and {absences} absences'))
