"""PDF export of a report."""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from confiscations.models import Confiscation
from reports.models import Report, ReportStatus
from reports.pdf import ReportPdfRenderer, _footer_text, html_to_paragraphs


def _auth(api_client, user):
    from rest_framework_simplejwt.tokens import AccessToken

    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")


@pytest.fixture()
def full_report(create_user):
    author = create_user(first_name="Paula", last_name="Printer")
    report = Report.objects.create(
        title="Dockside raid",
        author=author,
        status=ReportStatus.APPROVED,
        report_number="ND-24-05-001",
        content="<p>First paragraph.</p><p>Second <b>bold</b> line.<br>Third.</p>",
        map_data={
            "markers": [{"id": "M1", "x": 10, "y": 20, "color": "red", "title": "Boat"}],
            "shapes": [{"id": "S1", "type": "circle", "coords": [{"x": 10, "y": 20}], "radius": 30, "color": "blue"}],
        },
        legend={"red": "Vessel", "blue": ""},
        evidence={
            "photo": [{
                "id": "E1", "title": "Crates", "timestamp": "2024-05-01T10:00:00",
                "file_url": "https://cdn.example/crates.jpg", "file_name": "crates.jpg",
                "captured_by": {"type": "INTERNAL", "officer_id": author.pk},
                "linked_marker_ids": ["M1"],
            }],
            "video": [],
        },
    )
    Confiscation.objects.create(citizen_name="Ray Roe", drug_type="Heroin", quantity=1200, officer=author, report=report)
    return report


def test_html_to_paragraphs_strips_markup():
    assert html_to_paragraphs("<p>One</p><p>Two <i>x</i></p>Three<br/>Four") == ["One", "Two x", "Three", "Four"]
    assert html_to_paragraphs("") == []


@pytest.mark.django_db
def test_footer_uses_number_or_draft(create_user):
    report = Report(title="x", author=create_user())

    assert _footer_text(report, 1, 3).endswith("Report DRAFT — Page 1 / 3")
    report.report_number = "ND-24-05-007"
    assert "ND-24-05-007" in _footer_text(report, 2, 2)


@pytest.mark.django_db
def test_renderer_produces_pdf(full_report):
    pdf = ReportPdfRenderer().render(full_report, {full_report.author_id: "Paula Printer"})

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


@pytest.mark.django_db
def test_pdf_endpoint_downloads_file(api_client, full_report):
    _auth(api_client, full_report.author)

    response = api_client.get(reverse("report-pdf", args=[full_report.pk]))

    assert response.status_code == status.HTTP_200_OK
    assert response["Content-Type"] == "application/pdf"
    assert 'filename="ND-24-05-001.pdf"' in response["Content-Disposition"]
    assert response.content.startswith(b"%PDF")


@pytest.mark.django_db
def test_hidden_draft_cannot_be_exported(api_client, create_user):
    draft = Report.objects.create(title="Private", author=create_user())
    _auth(api_client, create_user())

    response = api_client.get(reverse("report-pdf", args=[draft.pk]))

    assert response.status_code == status.HTTP_404_NOT_FOUND
