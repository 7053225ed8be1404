import uuid

from django.test import TestCase
from rest_framework.test import APIClient

from config.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from senders.models import SenderID
from senders.services import submit_sender_id, transition_sender_id
from tests.factories import make_admin, make_sender, make_user


class ApprovalWorkflowTest(TestCase):

    def setUp(self):
        self.admin = make_admin()
        self.client_user = make_user()

    def test_approve_pending_sets_only_approved_at(self):
        sender = make_sender(self.client_user, 'NEWTEST456')

        result = transition_sender_id(sender.pk, SenderID.STATUS_APPROVED, self.admin)

        self.assertEqual(result.status, SenderID.STATUS_APPROVED)
        self.assertIsNotNone(result.approved_at)
        self.assertIsNone(result.rejected_at)
        self.assertEqual(result.approved_by, self.admin)

    def test_reject_pending_records_notes(self):
        sender = make_sender(self.client_user, 'REJECT789')

        result = transition_sender_id(
            sender.pk, SenderID.STATUS_REJECTED, self.admin, notes='does not meet requirements',
        )

        self.assertEqual(result.status, SenderID.STATUS_REJECTED)
        self.assertIsNotNone(result.rejected_at)
        self.assertIsNone(result.approved_at)
        self.assertEqual(result.admin_notes, 'does not meet requirements')

    def test_reapproval_conflicts_and_leaves_record_untouched(self):
        sender = make_sender(self.client_user, 'NEWTEST456')
        first = transition_sender_id(sender.pk, SenderID.STATUS_APPROVED, self.admin)

        with self.assertRaises(ConflictError) as ctx:
            transition_sender_id(sender.pk, SenderID.STATUS_APPROVED, self.admin, notes='again')
        self.assertEqual(ctx.exception.code, 'SENDER_ID_NOT_PENDING')

        sender.refresh_from_db()
        self.assertEqual(sender.approved_at, first.approved_at)
        self.assertEqual(sender.updated_at, first.updated_at)
        self.assertEqual(sender.admin_notes, '')

    def test_terminal_record_cannot_flip(self):
        sender = make_sender(self.client_user, 'REJECT789')
        transition_sender_id(sender.pk, SenderID.STATUS_REJECTED, self.admin)

        for _ in range(2):
            with self.assertRaises(ConflictError):
                transition_sender_id(sender.pk, SenderID.STATUS_APPROVED, self.admin)

        sender.refresh_from_db()
        self.assertEqual(sender.status, SenderID.STATUS_REJECTED)
        self.assertIsNone(sender.approved_at)

    def test_unknown_sender_is_not_found(self):
        with self.assertRaises(NotFoundError) as ctx:
            transition_sender_id(uuid.uuid4(), SenderID.STATUS_APPROVED, self.admin)
        self.assertEqual(ctx.exception.code, 'SENDER_ID_NOT_FOUND')

    def test_invalid_target_status(self):
        sender = make_sender(self.client_user)
        with self.assertRaises(ValidationError):
            transition_sender_id(sender.pk, SenderID.STATUS_PENDING, self.admin)

    def test_non_admin_cannot_transition(self):
        sender = make_sender(self.client_user)
        with self.assertRaises(ForbiddenError):
            transition_sender_id(sender.pk, SenderID.STATUS_APPROVED, self.client_user)
        sender.refresh_from_db()
        self.assertEqual(sender.status, SenderID.STATUS_PENDING)


class SubmissionTest(TestCase):

    def setUp(self):
        self.user = make_user()

    def test_submit_starts_pending(self):
        sender = submit_sender_id(self.user, 'MyBrand', purpose='alerts')
        self.assertEqual(sender.status, SenderID.STATUS_PENDING)
        self.assertIsNone(sender.approved_at)
        self.assertIsNone(sender.rejected_at)

    def test_duplicate_submission_conflicts(self):
        submit_sender_id(self.user, 'MyBrand')
        with self.assertRaises(ConflictError) as ctx:
            submit_sender_id(self.user, 'MyBrand')
        self.assertEqual(ctx.exception.code, 'SENDER_ID_EXISTS')

    def test_malformed_submission_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            submit_sender_id(self.user, 'My Brand')
        self.assertEqual(ctx.exception.code, 'INVALID_SENDER_ID_FORMAT')
        self.assertFalse(SenderID.objects.exists())


class SenderIdApiTest(TestCase):

    def setUp(self):
        self.api = APIClient()
        self.admin = make_admin()
        self.user = make_user()

    def test_client_submits_and_lists(self):
        self.api.force_authenticate(user=self.user)

        response = self.api.post('/api/sender-ids/', {'senderId': 'NEWTEST456', 'purpose': 'OTP'}, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['status'], 'PENDING')

        response = self.api.get('/api/sender-ids/?status=PENDING')
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s['sender_id'] for s in response.json()['data']], ['NEWTEST456'])

    def test_submit_without_sender_id(self):
        self.api.force_authenticate(user=self.user)
        response = self.api.post('/api/sender-ids/', {'purpose': 'OTP'}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['code'], 'MISSING_SENDER_ID')

    def test_admin_approves_then_conflicts(self):
        sender = make_sender(self.user, 'NEWTEST456')
        self.api.force_authenticate(user=self.admin)
        url = f'/api/sender-ids/{sender.pk}/status'

        response = self.api.put(url, {'status': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['status'], 'APPROVED')

        response = self.api.put(url, {'status': 'REJECTED', 'notes': 'changed my mind'}, format='json')
        self.assertEqual(response.status_code, 409)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertEqual(body['error']['code'], 'SENDER_ID_NOT_PENDING')

        sender.refresh_from_db()
        self.assertEqual(sender.status, SenderID.STATUS_APPROVED)
        self.assertIsNone(sender.rejected_at)

    def test_client_cannot_approve(self):
        sender = make_sender(self.user, 'NEWTEST456')
        self.api.force_authenticate(user=self.user)
        response = self.api.put(f'/api/sender-ids/{sender.pk}/status', {'status': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, 403)

    def test_unknown_id_is_404(self):
        self.api.force_authenticate(user=self.admin)
        response = self.api.put(f'/api/sender-ids/{uuid.uuid4()}/status', {'status': 'APPROVED'}, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error']['code'], 'SENDER_ID_NOT_FOUND')

    def test_admin_pending_queue(self):
        make_sender(self.user, 'FIRST1')
        approved = make_sender(self.user, 'SECOND2')
        transition_sender_id(approved.pk, SenderID.STATUS_APPROVED, self.admin)

        self.api.force_authenticate(user=self.admin)
        response = self.api.get('/api/admin/sender-ids/pending/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['count'], 1)
        self.assertEqual(response.json()['data'][0]['sender_id'], 'FIRST1')
