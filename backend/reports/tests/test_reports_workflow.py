"""
Integration tests — report lifecycle, visibility and picker search.

    draft → submitted → under_review → approved
                      ↘ revisions_required → submitted (same number)
"""

from __future__ import annotations

import shutil
import tempfile

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from accounts.models import Rank, SystemRole
from confiscations.models import Confiscation
from core.models import ActivityEntry
from reports.models import Report, ReportAttachment, ReportStatus, ReportStatusLog

User = get_user_model()

_PASSWORD = "Report!Pass2024"


class ReportTestBase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.chief_rank = Rank.objects.create(name="Chief", order=90, system_role=SystemRole.ADMIN)
        cls.officer_rank = Rank.objects.create(name="Officer", order=50, system_role=SystemRole.MEMBER)

        def make(username, badge, rank, first, last):
            return User.objects.create_user(
                username=username,
                password=_PASSWORD,
                email=f"{username}@narcotic.test",
                badge_number=badge,
                first_name=first,
                last_name=last,
                rank=rank,
            )

        cls.chief = make("chief", "100", cls.chief_rank, "Carla", "Chief")
        cls.author = make("author", "200", cls.officer_rank, "Alex", "Author")
        cls.partner = make("partner", "300", cls.officer_rank, "Pat", "Partner")
        cls.other = make("other", "400", cls.officer_rank, "Olli", "Other")

    def setUp(self):
        self.client = APIClient()

    def login_as(self, user):
        response = self.client.post(
            reverse("accounts:login"),
            {"identifier": user.username, "password": _PASSWORD},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, msg=response.data)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")

    def create_report(self, **overrides):
        payload = {
            "title": "Night market sweep",
            "content": "<p>Two dealers observed.</p>",
            "co_author_ids": [self.partner.pk],
        }
        payload.update(overrides)
        self.login_as(self.author)
        response = self.client.post(reverse("report-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, msg=response.data)
        return response.data["id"]

    def post_action(self, name, report_id, data=None):
        return self.client.post(reverse(name, args=[report_id]), data or {}, format="json")


class TestReportLifecycle(ReportTestBase):

    def test_create_is_draft_without_number(self):
        report_id = self.create_report()
        report = Report.objects.get(pk=report_id)

        self.assertEqual(report.status, ReportStatus.DRAFT)
        self.assertIsNone(report.report_number)
        self.assertEqual(list(report.co_authors.all()), [self.partner])
        self.assertEqual(report.map_data, {"markers": [], "shapes": []})
        self.assertEqual(report.evidence, {"photo": [], "video": []})

    def test_author_is_never_their_own_co_author(self):
        report_id = self.create_report(co_author_ids=[self.author.pk, self.partner.pk])

        self.assertEqual(list(Report.objects.get(pk=report_id).co_authors.all()), [self.partner])

    def test_submit_assigns_monthly_number(self):
        report_id = self.create_report()

        response = self.post_action("report-submit", report_id)

        self.assertEqual(response.status_code, status.HTTP_200_OK, msg=response.data)
        expected = timezone.now().strftime("ND-%y-%m-") + "001"
        self.assertEqual(response.data["report_number"], expected)
        self.assertEqual(response.data["status"], ReportStatus.SUBMITTED)
        self.assertTrue(ActivityEntry.objects.filter(event_type="report_submitted").exists())

    def test_second_report_gets_next_number(self):
        first = self.create_report()
        self.post_action("report-submit", first)
        second = self.create_report(title="Second")

        response = self.post_action("report-submit", second)

        self.assertTrue(response.data["report_number"].endswith("-002"), msg=response.data["report_number"])

    def test_approve_path(self):
        report_id = self.create_report()
        self.post_action("report-submit", report_id)

        self.login_as(self.chief)
        response = self.post_action("report-start-review", report_id)
        self.assertEqual(response.data["status"], ReportStatus.UNDER_REVIEW)
        response = self.post_action("report-review", report_id, {"action": "approve"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, msg=response.data)
        self.assertEqual(response.data["status"], ReportStatus.APPROVED)
        self.assertEqual(response.data["reviewer"]["id"], self.chief.pk)
        self.assertIsNotNone(response.data["approved_at"])
        self.assertEqual(
            list(ReportStatusLog.objects.filter(report_id=report_id).order_by("id").values_list("to_status", flat=True)),
            [ReportStatus.SUBMITTED, ReportStatus.UNDER_REVIEW, ReportStatus.APPROVED],
        )

    def test_reject_then_resubmit_keeps_number(self):
        report_id = self.create_report()
        number = self.post_action("report-submit", report_id).data["report_number"]

        self.login_as(self.chief)
        self.assertEqual(
            self.post_action("report-review", report_id, {"action": "reject"}).status_code,
            status.HTTP_400_BAD_REQUEST,
        )
        response = self.post_action("report-review", report_id, {"action": "reject", "reason": "Add the map."})
        self.assertEqual(response.data["status"], ReportStatus.REVISIONS_REQUIRED)
        self.assertEqual(response.data["rejection_reason"], "Add the map.")

        self.login_as(self.partner)
        patch = self.client.patch(
            reverse("report-detail", args=[report_id]),
            {"map_data": {"markers": [{"x": 10, "y": 20}]}},
            format="json",
        )
        self.assertEqual(patch.status_code, status.HTTP_200_OK, msg=patch.data)
        response = self.post_action("report-submit", report_id)
        self.assertEqual(response.data["report_number"], number)

        self.login_as(self.chief)
        response = self.post_action("report-review", report_id, {"action": "approve"})
        self.assertEqual(response.data["rejection_reason"], "")

    def test_approved_report_cannot_be_resubmitted(self):
        report_id = self.create_report()
        Report.objects.filter(pk=report_id).update(status=ReportStatus.APPROVED)

        response = self.post_action("report-submit", report_id)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_review_of_draft_is_invalid(self):
        report_id = self.create_report()
        self.login_as(self.chief)

        response = self.post_action("report-review", report_id, {"action": "approve"})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_member_cannot_review(self):
        report_id = self.create_report()
        self.post_action("report-submit", report_id)

        response = self.post_action("report-review", report_id, {"action": "approve"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_submitted_report_is_locked_for_owners_but_not_admins(self):
        report_id = self.create_report()
        self.post_action("report-submit", report_id)
        url = reverse("report-detail", args=[report_id])

        self.assertEqual(
            self.client.patch(url, {"title": "Edited"}, format="json").status_code,
            status.HTTP_403_FORBIDDEN,
        )
        self.login_as(self.chief)
        response = self.client.patch(url, {"title": "Edited"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, msg=response.data)
        self.assertEqual(response.data["title"], "Edited")

    def test_only_admin_deletes(self):
        report_id = self.create_report()
        url = reverse("report-detail", args=[report_id])

        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)
        self.login_as(self.chief)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Report.objects.filter(pk=report_id).exists())


class TestReportVisibility(ReportTestBase):

    def test_drafts_are_hidden_from_non_owners(self):
        draft_id = self.create_report(title="Secret draft")
        submitted_id = self.create_report(title="Public report")
        self.post_action("report-submit", submitted_id)

        self.login_as(self.other)
        ids = [row["id"] for row in self.client.get(reverse("report-list")).data]
        self.assertEqual(ids, [submitted_id])
        response = self.client.get(reverse("report-detail", args=[draft_id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_co_author_and_admin_see_draft(self):
        draft_id = self.create_report()

        self.login_as(self.partner)
        self.assertEqual(self.client.get(reverse("report-detail", args=[draft_id])).status_code, 200)
        self.login_as(self.chief)
        self.assertEqual(self.client.get(reverse("report-detail", args=[draft_id])).status_code, 200)

    def test_list_filters_by_status_and_search(self):
        first = self.create_report(title="Harbor stakeout")
        self.create_report(title="Parking lot deal")
        self.post_action("report-submit", first)

        response = self.client.get(reverse("report-list"), {"status": "submitted"})
        self.assertEqual([row["id"] for row in response.data], [first])
        response = self.client.get(reverse("report-list"), {"search": "parking"})
        self.assertEqual([row["title"] for row in response.data], ["Parking lot deal"])

    def test_list_filters_by_author_and_rejects_unknown_status(self):
        mine = self.create_report()
        Report.objects.create(title="Someone else", author=self.other, status=ReportStatus.SUBMITTED)

        response = self.client.get(reverse("report-list"), {"author": self.author.pk})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in response.data], [mine])

        response = self.client.get(reverse("report-list"), {"status": "archived"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_row_carries_names(self):
        self.create_report()

        row = self.client.get(reverse("report-list")).data[0]

        self.assertEqual(row["author_name"], "Alex Author")
        self.assertEqual(row["co_author_names"], ["Pat Partner"])
        self.assertEqual(row["status_display"], "Draft")


class TestDraftSearch(ReportTestBase):

    def test_short_query_returns_nothing(self):
        self.create_report(title="Alpha")

        response = self.client.get(reverse("report-search-drafts"), {"q": "A"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_only_editable_reports_match_and_limit_is_five(self):
        for i in range(7):
            self.create_report(title=f"Warehouse {i}")
        submitted = self.create_report(title="Warehouse submitted")
        self.post_action("report-submit", submitted)

        response = self.client.get(reverse("report-search-drafts"), {"q": "ware"})

        self.assertEqual(len(response.data), 5)
        self.assertNotIn(submitted, [row["id"] for row in response.data])
        self.assertEqual(response.data[0]["title"], "Warehouse 6")

    def test_other_officers_drafts_are_not_offered(self):
        self.create_report(title="Warehouse")

        self.login_as(self.other)
        response = self.client.get(reverse("report-search-drafts"), {"q": "ware"})

        self.assertEqual(response.data, [])


class TestReportLinks(ReportTestBase):

    def test_confiscations_link_on_create(self):
        seizure = Confiscation.objects.create(
            citizen_name="John Roe", drug_type="Cocaine", quantity=250, officer=self.author,
        )

        report_id = self.create_report(confiscation_ids=[seizure.pk])

        seizure.refresh_from_db()
        self.assertEqual(seizure.report_id, report_id)
        detail = self.client.get(reverse("report-detail", args=[report_id])).data
        self.assertEqual(detail["confiscations"][0]["citizen_name"], "John Roe")

    def test_unknown_confiscation_is_404_and_rolls_back(self):
        self.login_as(self.author)
        response = self.client.post(
            reverse("report-list"),
            {"title": "Ghost link", "confiscation_ids": [987654]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(Report.objects.filter(title="Ghost link").exists())


@override_settings(ATTACHMENT_MAX_BYTES=1024)
class TestAttachments(ReportTestBase):

    def _upload(self, report_id, content=b"scene photo bytes", **extra):
        data = {"file": SimpleUploadedFile("scene.jpg", content, content_type="image/jpeg"), "file_type": "image"}
        data.update(extra)
        return self.client.post(reverse("report-attachments", args=[report_id]), data, format="multipart")

    def test_owner_uploads_attachment(self):
        report_id = self.create_report()

        with self.settings(MEDIA_ROOT=self._media_root()):
            response = self._upload(report_id, caption="Front door")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, msg=response.data)
        self.assertEqual(response.data["caption"], "Front door")
        self.assertEqual(response.data["uploaded_by_name"], "Alex Author")
        self.assertEqual(ReportAttachment.objects.filter(report_id=report_id).count(), 1)

    def test_oversized_upload_is_rejected(self):
        report_id = self.create_report()

        response = self._upload(report_id, content=b"x" * 2048)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stranger_cannot_upload(self):
        report_id = self.create_report()
        self.post_action("report-submit", report_id)
        self.login_as(self.other)

        response = self._upload(report_id)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def _media_root(self):
        path = tempfile.mkdtemp(prefix="nd-media-")
        self.addCleanup(shutil.rmtree, path, True)
        return path
