"""
Registries app Service Layer.

Reads are open to every officer; every mutation is admin only.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.db.models import QuerySet

from core.domain.access import require_admin
from core.domain.exceptions import Conflict, NotFound
from core.domain.transactions import lock_for_update

from .models import DocumentTemplate, DrugType

logger = logging.getLogger(__name__)


class DrugTypeService:

    @staticmethod
    def list_drug_types() -> QuerySet:
        return DrugType.objects.order_by("name")

    @staticmethod
    @transaction.atomic
    def create_drug_type(name: str, requesting_user: Any) -> DrugType:
        require_admin(requesting_user)
        name = name.strip()
        if DrugType.objects.filter(name__iexact=name).exists():
            raise Conflict(f"Drug type '{name}' already exists.")
        drug_type = DrugType.objects.create(name=name)
        logger.info("Drug type %r created by %s", name, requesting_user)
        return drug_type

    @staticmethod
    @transaction.atomic
    def delete_drug_type(drug_type_id: int, requesting_user: Any) -> None:
        drug_type = lock_for_update(DrugType, drug_type_id)
        require_admin(requesting_user)
        drug_type.delete()
        logger.info("Drug type %r deleted by %s", drug_type.name, requesting_user)


class TemplateService:

    @staticmethod
    def list_templates(template_type: str | None = None) -> QuerySet:
        qs = DocumentTemplate.objects.all()
        if template_type:
            qs = qs.filter(type=template_type)
        return qs.order_by("name")

    @staticmethod
    def get_template(template_id: int) -> DocumentTemplate:
        try:
            return DocumentTemplate.objects.get(pk=template_id)
        except (DocumentTemplate.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"Template with id {template_id} not found.")

    @staticmethod
    @transaction.atomic
    def create_template(validated_data: dict[str, Any], requesting_user: Any) -> DocumentTemplate:
        require_admin(requesting_user)
        template = DocumentTemplate.objects.create(**validated_data)
        logger.info("Template %s (%s) created by %s", template.pk, template.type, requesting_user)
        return template

    @staticmethod
    @transaction.atomic
    def update_template(template_id: int, validated_data: dict[str, Any], requesting_user: Any) -> DocumentTemplate:
        template = lock_for_update(DocumentTemplate, template_id)
        require_admin(requesting_user)
        for field, value in validated_data.items():
            setattr(template, field, value)
        template.save()
        logger.info("Template %s updated by %s", template.pk, requesting_user)
        return template

    @staticmethod
    @transaction.atomic
    def delete_template(template_id: int, requesting_user: Any) -> None:
        template = lock_for_update(DocumentTemplate, template_id)
        require_admin(requesting_user)
        template.delete()
        logger.info("Template %s deleted by %s", template_id, requesting_user)
