from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from campus_portal.core.roles import Role
from campus_portal.models import Election, Candidate, Vote
from campus_portal.models.election import CandidateStatus, ElectionStatus
from campus_portal.schemas.election import ElectionUpdate
from campus_portal.services.election_service import ElectionService, DuplicateVoteError

from conftest import auth_headers, png_file


def make_election(db_session, admin, starts_in: timedelta, lasts: timedelta = timedelta(hours=2),
                  **fields) -> Election:
    start = datetime.utcnow() + starts_in
    election = Election(
        title=fields.pop('title', 'Student council'),
        position=fields.pop('position', 'President'),
        start_time=start,
        end_time=start + lasts,
        created_by_id=admin.id,
        **fields
    )
    db_session.add(election)
    db_session.commit()
    db_session.refresh(election)
    return election


def add_candidate(db_session, election, student, status=CandidateStatus.APPROVED) -> Candidate:
    candidate = Candidate(election_id=election.id, student_id=student.id, status=status)
    db_session.add(candidate)
    db_session.commit()
    db_session.refresh(candidate)
    return candidate


@pytest.fixture
def upcoming(db_session, admin):
    return make_election(db_session, admin, starts_in=timedelta(days=1))


@pytest.fixture
def active(db_session, admin):
    return make_election(db_session, admin, starts_in=timedelta(hours=-1))


@pytest.fixture
def completed(db_session, admin):
    return make_election(db_session, admin, starts_in=timedelta(days=-2))


class TestElectionStatus:
    def test_status_follows_the_voting_window(self, upcoming, active, completed):
        assert upcoming.status == ElectionStatus.UPCOMING
        assert active.status == ElectionStatus.ACTIVE
        assert completed.status == ElectionStatus.COMPLETED

    async def test_list_filters_by_status(self, client: AsyncClient, student, upcoming, active, completed):
        response = await client.get('/api/elections?status=active', headers=auth_headers(student))

        assert response.status_code == 200
        assert [e['id'] for e in response.json()] == [active.id]

    async def test_list_requires_login(self, client: AsyncClient):
        response = await client.get('/api/elections')

        assert response.status_code == 401
        assert response.json()['success'] is False


class TestElectionAdmin:
    async def test_admin_creates_election(self, client: AsyncClient, admin):
        start = datetime.utcnow() + timedelta(days=3)
        response = await client.post('/api/elections', headers=auth_headers(admin), json={
            'title': 'Sports secretary',
            'position': 'Secretary',
            'start_time': start.isoformat(),
            'end_time': (start + timedelta(hours=8)).isoformat(),
        })

        assert response.status_code == 201
        data = response.json()
        assert data['status'] == 'upcoming'
        assert data['results_published'] is False

    async def test_timezone_aware_times_are_stored_as_utc(self, client: AsyncClient, admin, db_session):
        response = await client.post('/api/elections', headers=auth_headers(admin), json={
            'title': 'Cultural head',
            'position': 'Head',
            'start_time': '2030-01-01T10:00:00+05:30',
            'end_time': '2030-01-01T18:00:00+05:30',
        })

        election = db_session.get(Election, response.json()['id'])
        assert election.start_time == datetime(2030, 1, 1, 4, 30)

    async def test_end_must_follow_start(self, client: AsyncClient, admin):
        start = datetime.utcnow() + timedelta(days=3)
        response = await client.post('/api/elections', headers=auth_headers(admin), json={
            'title': 'Broken',
            'position': 'None',
            'start_time': start.isoformat(),
            'end_time': (start - timedelta(hours=1)).isoformat(),
        })

        assert response.status_code == 422

    async def test_mixed_naive_and_aware_times(self, client: AsyncClient, admin, db_session):
        response = await client.post('/api/elections', headers=auth_headers(admin), json={
            'title': 'Mess committee',
            'position': 'Member',
            'start_time': '2030-01-01T10:00:00',
            'end_time': '2030-01-02T10:00:00+05:30',
        })

        assert response.status_code == 201
        election = db_session.get(Election, response.json()['id'])
        assert election.end_time == datetime(2030, 1, 2, 4, 30)

    async def test_mixed_times_compared_in_utc(self, client: AsyncClient, admin):
        # 12:00 in +05:30 is 06:30 UTC, before the naive 10:00 UTC start
        response = await client.post('/api/elections', headers=auth_headers(admin), json={
            'title': 'Mess committee',
            'position': 'Member',
            'start_time': '2030-01-01T10:00:00',
            'end_time': '2030-01-01T12:00:00+05:30',
        })

        assert response.status_code == 422

    async def test_update_with_aware_end_time(self, client: AsyncClient, admin, upcoming, db_session):
        new_end = (upcoming.start_time + timedelta(hours=4)).isoformat() + '+00:00'

        response = await client.patch(
            f'/api/elections/{upcoming.id}', headers=auth_headers(admin), json={'end_time': new_end}
        )

        assert response.status_code == 200
        db_session.refresh(upcoming)
        assert upcoming.end_time == upcoming.start_time + timedelta(hours=4)

    async def test_student_cannot_create_election(self, client: AsyncClient, student):
        response = await client.post('/api/elections', headers=auth_headers(student), json={})

        assert response.status_code in (403, 422)

    async def test_update_and_delete(self, client: AsyncClient, admin, upcoming, db_session):
        response = await client.patch(
            f'/api/elections/{upcoming.id}', headers=auth_headers(admin), json={'title': 'Renamed'}
        )
        assert response.status_code == 200
        assert response.json()['title'] == 'Renamed'

        response = await client.delete(f'/api/elections/{upcoming.id}', headers=auth_headers(admin))
        assert response.status_code == 200
        assert db_session.get(Election, upcoming.id) is None

    async def test_cannot_move_start_once_votes_exist(self, db_session, admin, active, make_user):
        voter = make_user(Role.STUDENT)
        candidate = add_candidate(db_session, active, make_user(Role.STUDENT))
        ElectionService(db_session).cast_vote(active.id, voter, candidate.id)

        with pytest.raises(ValueError):
            ElectionService(db_session).update_election(
                active.id, ElectionUpdate(start_time=datetime.utcnow() - timedelta(hours=3))
            )

    async def test_null_start_is_ignored_once_votes_exist(self, db_session, admin, active, make_user):
        voter = make_user(Role.STUDENT)
        candidate = add_candidate(db_session, active, make_user(Role.STUDENT))
        ElectionService(db_session).cast_vote(active.id, voter, candidate.id)
        start = active.start_time

        updated = ElectionService(db_session).update_election(
            active.id, ElectionUpdate(start_time=None, title='Renamed')
        )

        assert updated.title == 'Renamed'
        assert updated.start_time == start

    async def test_missing_election(self, client: AsyncClient, admin):
        response = await client.get('/api/elections/999', headers=auth_headers(admin))

        assert response.status_code == 404
        assert response.json()['message'] == 'Election not found'


class TestCandidates:
    async def test_student_registers_with_photo(self, client: AsyncClient, student, upcoming):
        response = await client.post(
            f'/api/elections/{upcoming.id}/candidates',
            headers=auth_headers(student),
            data={'manifesto': 'More library hours'},
            files={'photo': png_file('me.png')},
        )

        assert response.status_code == 201
        data = response.json()
        assert data['status'] == 'pending'
        assert data['name'] == student.full_name
        assert data['photo'].startswith('uploads/candidates/me-')
        assert data['photo'].endswith('.png')

    async def test_registration_closed_once_voting_starts(self, client: AsyncClient, student, active):
        response = await client.post(
            f'/api/elections/{active.id}/candidates', headers=auth_headers(student), data={}
        )

        assert response.status_code == 400

    async def test_unverified_student_cannot_stand(self, client: AsyncClient, make_user, upcoming):
        unverified = make_user(Role.STUDENT, verified=False)

        response = await client.post(
            f'/api/elections/{upcoming.id}/candidates', headers=auth_headers(unverified), data={}
        )

        assert response.status_code == 400

    async def test_one_candidacy_per_election(self, client: AsyncClient, student, upcoming):
        headers = auth_headers(student)
        first = await client.post(f'/api/elections/{upcoming.id}/candidates', headers=headers, data={})
        second = await client.post(f'/api/elections/{upcoming.id}/candidates', headers=headers, data={})

        assert first.status_code == 201
        assert second.status_code == 400

    async def test_students_only_see_approved_candidates(self, client: AsyncClient, db_session, admin,
                                                         student, upcoming, make_user):
        approved = add_candidate(db_session, upcoming, make_user(Role.STUDENT))
        add_candidate(db_session, upcoming, make_user(Role.STUDENT), status=CandidateStatus.PENDING)

        as_student = await client.get(f'/api/elections/{upcoming.id}/candidates', headers=auth_headers(student))
        as_admin = await client.get(f'/api/elections/{upcoming.id}/candidates', headers=auth_headers(admin))

        assert [c['id'] for c in as_student.json()] == [approved.id]
        assert len(as_admin.json()) == 2

    async def test_admin_reviews_candidate(self, client: AsyncClient, db_session, admin, student, upcoming):
        candidate = add_candidate(db_session, upcoming, student, status=CandidateStatus.PENDING)

        response = await client.patch(
            f'/api/elections/candidates/{candidate.id}',
            headers=auth_headers(admin),
            json={'status': 'approved'}
        )

        assert response.status_code == 200
        assert response.json()['status'] == 'approved'


class TestVoting:
    async def test_vote_once(self, client: AsyncClient, db_session, student, active, make_user):
        candidate = add_candidate(db_session, active, make_user(Role.STUDENT))
        headers = auth_headers(student)

        first = await client.post(f'/api/elections/{active.id}/vote', headers=headers,
                                  json={'candidate_id': candidate.id})
        second = await client.post(f'/api/elections/{active.id}/vote', headers=headers,
                                   json={'candidate_id': candidate.id})

        assert first.status_code == 200
        assert first.json()['success'] is True
        assert second.status_code == 409
        assert db_session.query(Vote).count() == 1

        status = await client.get(f'/api/elections/{active.id}/my-vote', headers=headers)
        assert status.json()['has_voted'] is True

    async def test_cannot_vote_before_start(self, client: AsyncClient, db_session, student, upcoming, make_user):
        candidate = add_candidate(db_session, upcoming, make_user(Role.STUDENT))

        response = await client.post(f'/api/elections/{upcoming.id}/vote', headers=auth_headers(student),
                                     json={'candidate_id': candidate.id})

        assert response.status_code == 400

    async def test_cannot_vote_for_unapproved_candidate(self, client: AsyncClient, db_session, student,
                                                        active, make_user):
        candidate = add_candidate(db_session, active, make_user(Role.STUDENT), status=CandidateStatus.PENDING)

        response = await client.post(f'/api/elections/{active.id}/vote', headers=auth_headers(student),
                                     json={'candidate_id': candidate.id})

        assert response.status_code == 400

    async def test_cannot_vote_for_candidate_of_another_election(self, client: AsyncClient, db_session, admin,
                                                                 student, active, make_user):
        other = make_election(db_session, admin, starts_in=timedelta(hours=-1), title='Other')
        candidate = add_candidate(db_session, other, make_user(Role.STUDENT))

        response = await client.post(f'/api/elections/{active.id}/vote', headers=auth_headers(student),
                                     json={'candidate_id': candidate.id})

        assert response.status_code == 400

    async def test_unverified_student_cannot_vote(self, client: AsyncClient, db_session, active, make_user):
        candidate = add_candidate(db_session, active, make_user(Role.STUDENT))
        voter = make_user(Role.STUDENT, verified=False)

        response = await client.post(f'/api/elections/{active.id}/vote', headers=auth_headers(voter),
                                     json={'candidate_id': candidate.id})

        assert response.status_code == 400

    async def test_teacher_cannot_vote(self, client: AsyncClient, db_session, teacher, active, make_user):
        candidate = add_candidate(db_session, active, make_user(Role.STUDENT))

        response = await client.post(f'/api/elections/{active.id}/vote', headers=auth_headers(teacher),
                                     json={'candidate_id': candidate.id})

        assert response.status_code == 403

    def test_service_raises_duplicate_vote(self, db_session, active, make_user):
        voter = make_user(Role.STUDENT)
        candidate = add_candidate(db_session, active, make_user(Role.STUDENT))
        service = ElectionService(db_session)
        service.cast_vote(active.id, voter, candidate.id)

        with pytest.raises(DuplicateVoteError):
            service.cast_vote(active.id, voter, candidate.id)


class TestResults:
    def _vote(self, db_session, election, candidate, voter):
        db_session.add(Vote(election_id=election.id, candidate_id=candidate.id, voter_id=voter.id))
        db_session.commit()

    def test_tally_sorted_with_leaders(self, db_session, completed, make_user):
        first = add_candidate(db_session, completed, make_user(Role.STUDENT))
        second = add_candidate(db_session, completed, make_user(Role.STUDENT))
        add_candidate(db_session, completed, make_user(Role.STUDENT), status=CandidateStatus.REJECTED)
        for _ in range(2):
            self._vote(db_session, completed, second, make_user(Role.STUDENT))
        self._vote(db_session, completed, first, make_user(Role.STUDENT))

        results = ElectionService(db_session).get_results(completed.id)

        assert results['total_votes'] == 3
        assert [row['candidate_id'] for row in results['tally']] == [second.id, first.id]
        assert [row['votes'] for row in results['tally']] == [2, 1]
        assert results['leaders'] == [second.id]

    def test_tie_reports_every_leader(self, db_session, completed, make_user):
        first = add_candidate(db_session, completed, make_user(Role.STUDENT))
        second = add_candidate(db_session, completed, make_user(Role.STUDENT))
        self._vote(db_session, completed, first, make_user(Role.STUDENT))
        self._vote(db_session, completed, second, make_user(Role.STUDENT))

        results = ElectionService(db_session).get_results(completed.id)

        assert sorted(results['leaders']) == sorted([first.id, second.id])

    def test_no_votes_no_leaders(self, db_session, completed, make_user):
        add_candidate(db_session, completed, make_user(Role.STUDENT))

        results = ElectionService(db_session).get_results(completed.id)

        assert results['total_votes'] == 0
        assert results['leaders'] == []

    async def test_results_hidden_until_published(self, client: AsyncClient, admin, student, completed):
        hidden = await client.get(f'/api/elections/{completed.id}/results', headers=auth_headers(student))
        assert hidden.status_code == 403

        admin_view = await client.get(f'/api/elections/{completed.id}/results', headers=auth_headers(admin))
        assert admin_view.status_code == 200

        publish = await client.post(f'/api/elections/{completed.id}/publish', headers=auth_headers(admin))
        assert publish.status_code == 200
        assert publish.json()['results_published'] is True

        visible = await client.get(f'/api/elections/{completed.id}/results', headers=auth_headers(student))
        assert visible.status_code == 200

    async def test_cannot_publish_running_election(self, client: AsyncClient, admin, active):
        response = await client.post(f'/api/elections/{active.id}/publish', headers=auth_headers(admin))

        assert response.status_code == 400
