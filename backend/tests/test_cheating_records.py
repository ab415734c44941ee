import os

import pytest
from httpx import AsyncClient

from campus_portal.core.roles import Role
from campus_portal.services.cheating_record_service import CheatingRecordService
from campus_portal.utils.file_paths import get_full_upload_path

from conftest import auth_headers, png_file


def record_form(student, **overrides) -> dict:
    form = {
        'student_id': str(student.id),
        'name': student.full_name,
        'registration_number': student.registration_number,
        'course': 'CS101',
        'reason': 'Phone found during the mid-term',
    }
    form.update(overrides)
    return form


async def file_record(client, reporter, student, **overrides):
    return await client.post(
        '/api/cheating-records',
        headers=auth_headers(reporter),
        data=record_form(student, **overrides),
        files={'proof': png_file('evidence.png')},
    )


class TestFileRecord:
    async def test_teacher_files_record(self, client: AsyncClient, teacher, student):
        response = await file_record(client, teacher, student)

        assert response.status_code == 201
        data = response.json()
        assert data['student_id'] == student.id
        assert data['reported_by_id'] == teacher.id
        assert data['proof'].startswith('uploads/proofs/evidence-')
        assert os.path.exists(get_full_upload_path(data['proof']))

        notifications = await client.get('/api/users/me/notifications', headers=auth_headers(student))
        assert notifications.json()[0]['type'] == 'cheating_record'

    async def test_proof_is_mandatory(self, client: AsyncClient, teacher, student):
        response = await client.post(
            '/api/cheating-records', headers=auth_headers(teacher), data=record_form(student)
        )

        assert response.status_code == 422

    @pytest.mark.parametrize('field', ['name', 'registration_number', 'course'])
    async def test_blank_required_field(self, client: AsyncClient, teacher, student, field):
        response = await file_record(client, teacher, student, **{field: '  '})

        assert response.status_code == 400
        assert field in response.json()['message']

    async def test_reason_is_optional(self, client: AsyncClient, admin, student):
        form = record_form(student)
        del form['reason']

        response = await client.post(
            '/api/cheating-records', headers=auth_headers(admin), data=form,
            files={'proof': png_file()}
        )

        assert response.status_code == 201
        assert response.json()['reason'] is None

    async def test_target_must_be_a_student(self, client: AsyncClient, admin, teacher):
        response = await client.post(
            '/api/cheating-records',
            headers=auth_headers(admin),
            data={'student_id': str(teacher.id), 'name': 'x', 'registration_number': 'y', 'course': 'z'},
            files={'proof': png_file()},
        )

        assert response.status_code == 404

    async def test_failed_record_leaves_no_file(self, client: AsyncClient, admin, student):
        proofs_dir = get_full_upload_path('uploads/proofs')
        before = set(os.listdir(proofs_dir)) if os.path.isdir(proofs_dir) else set()

        await file_record(client, admin, student, course=' ')

        after = set(os.listdir(proofs_dir)) if os.path.isdir(proofs_dir) else set()
        assert after == before

    async def test_students_cannot_file(self, client: AsyncClient, student, make_user):
        response = await file_record(client, student, make_user(Role.STUDENT))

        assert response.status_code == 403

    def test_service_rejects_missing_proof(self, db_session, student):
        with pytest.raises(ValueError):
            CheatingRecordService(db_session).create_record(
                student_id=student.id, name='A', registration_number='B', proof='', course='C'
            )


class TestListAndDelete:
    async def test_faculty_filters_by_course(self, client: AsyncClient, teacher, student):
        await file_record(client, teacher, student, course='CS101')
        await file_record(client, teacher, student, course='MA201')

        response = await client.get('/api/cheating-records?course=MA201', headers=auth_headers(teacher))

        assert [r['course'] for r in response.json()] == ['MA201']

    async def test_student_sees_own_records(self, client: AsyncClient, teacher, student, make_user):
        await file_record(client, teacher, student)
        await file_record(client, teacher, make_user(Role.STUDENT))

        response = await client.get('/api/cheating-records/mine', headers=auth_headers(student))

        assert [r['student_id'] for r in response.json()] == [student.id]

    async def test_student_cannot_list_all(self, client: AsyncClient, student):
        response = await client.get('/api/cheating-records', headers=auth_headers(student))

        assert response.status_code == 403

    async def test_admin_deletes_record_and_proof(self, client: AsyncClient, admin, teacher, student):
        created = (await file_record(client, teacher, student)).json()

        response = await client.delete(f"/api/cheating-records/{created['id']}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert not os.path.exists(get_full_upload_path(created['proof']))

    async def test_teacher_cannot_delete(self, client: AsyncClient, teacher, student):
        created = (await file_record(client, teacher, student)).json()

        response = await client.delete(f"/api/cheating-records/{created['id']}", headers=auth_headers(teacher))

        assert response.status_code == 403
