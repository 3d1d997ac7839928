# =============================================================================
# school_core/data/mappers.py
# Field mapping between in-memory entities and Supabase rows
# =============================================================================
"""
Every persisted entity field has exactly one remote column and vice versa.
The tables below are the single source for that mapping; ``to_row`` and
``from_row`` use them in both directions.
"""

from __future__ import annotations
from dataclasses import asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Type

from school_core.logging import get_logger
from school_core.models.entities import (
    Address,
    Assignment,
    ClassGroup,
    Project,
    ProjectCategory,
    ProjectOrigin,
    SchoolProfile,
    default_infrastructure,
    default_special_education,
)

logger = get_logger(__name__)


PROFILE_FIELDS: Dict[str, str] = {
    "id": "id",
    "name": "nome",
    "cnpj": "cnpj",
    "inep_code": "codigo_inep",
    "email": "email",
    "phone": "telefone",
    "address": "endereco",
    "teaching_types": "tipos_ensino",
    "grades": "anos_series",
    "shifts": "turnos",
    "special_education": "aee",
    "infrastructure": "infraestrutura",
    "principal": "diretor",
    "vice_principal": "vice_diretor",
}

PROJECT_FIELDS: Dict[str, str] = {
    "id": "id",
    "name": "nome",
    "description": "descricao",
    "category": "categoria",
    "origin": "origem",
    "active": "ativo",
}

CLASS_GROUP_FIELDS: Dict[str, str] = {
    "id": "id",
    "project_id": "projeto_id",
    "name": "nome",
    "description": "descricao",
    "capacity": "vagas",
}

ASSIGNMENT_FIELDS: Dict[str, str] = {
    "id": "id",
    "project_id": "projeto_id",
    "class_group_id": "turma_id",
    "teacher_name": "docente_nome",
    "lessons": "aulas",
}

FIELD_MAPS: Dict[Type, Dict[str, str]] = {
    SchoolProfile: PROFILE_FIELDS,
    Project: PROJECT_FIELDS,
    ClassGroup: CLASS_GROUP_FIELDS,
    Assignment: ASSIGNMENT_FIELDS,
}


def inverse(field_map: Dict[str, str]) -> Dict[str, str]:
    """Column -> field lookup for a field map."""
    return {column: name for name, column in field_map.items()}


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Address):
        return asdict(value)
    return value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _count(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _id(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _enum(enum_cls: Type[Enum], value: Any, default: Enum, unknown: Enum) -> Enum:
    if not value:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(f"Unknown {enum_cls.__name__} value from remote: {value!r}")
        return unknown


def to_row(entity: Any, include_id: bool = False) -> Dict[str, Any]:
    """
    Project an entity onto its remote columns.

    Args:
        entity: SchoolProfile, Project, ClassGroup or Assignment
        include_id: Whether to send the id column (never for inserts)
    """
    field_map = FIELD_MAPS[type(entity)]
    row = {
        column: _column_value(getattr(entity, name))
        for name, column in field_map.items()
        if name != "id"
    }
    if include_id and entity.id is not None:
        row["id"] = entity.id
    if isinstance(entity, SchoolProfile):
        row["updated_at"] = datetime.now(timezone.utc).isoformat()
    return row


def profile_from_row(row: Dict[str, Any]) -> SchoolProfile:
    f = inverse(PROFILE_FIELDS)
    data = {f[col]: val for col, val in row.items() if col in f}
    return SchoolProfile(
        id=_id(data.get("id")),
        name=_text(data.get("name")),
        cnpj=_text(data.get("cnpj")),
        inep_code=_text(data.get("inep_code")),
        email=_text(data.get("email")),
        phone=_text(data.get("phone")),
        address=Address.from_dict(data.get("address")),
        teaching_types=list(data.get("teaching_types") or []),
        grades=list(data.get("grades") or []),
        shifts=list(data.get("shifts") or []),
        special_education=data.get("special_education") or default_special_education(),
        infrastructure=data.get("infrastructure") or default_infrastructure(),
        principal=_text(data.get("principal")),
        vice_principal=_text(data.get("vice_principal")),
    )


def project_from_row(row: Dict[str, Any]) -> Project:
    return Project(
        id=_id(row.get("id")),
        name=_text(row.get("nome")),
        description=_text(row.get("descricao")),
        category=_enum(
            ProjectCategory, row.get("categoria"),
            ProjectCategory.PEDAGOGICAL, ProjectCategory.OTHER,
        ),
        origin=_enum(
            ProjectOrigin, row.get("origem"),
            ProjectOrigin.OWN, ProjectOrigin.EXTERNAL,
        ),
        active=True if row.get("ativo") is None else bool(row["ativo"]),
    )


def class_group_from_row(row: Dict[str, Any]) -> ClassGroup:
    return ClassGroup(
        id=_id(row.get("id")),
        project_id=_id(row.get("projeto_id")),
        name=_text(row.get("nome")),
        description=_text(row.get("descricao")),
        capacity=_count(row.get("vagas")),
    )


def assignment_from_row(row: Dict[str, Any]) -> Assignment:
    return Assignment(
        id=_id(row.get("id")),
        project_id=_id(row.get("projeto_id")),
        class_group_id=_id(row.get("turma_id")),
        teacher_name=_text(row.get("docente_nome")),
        lessons=_count(row.get("aulas")),
    )


ROW_READERS = {
    SchoolProfile: profile_from_row,
    Project: project_from_row,
    ClassGroup: class_group_from_row,
    Assignment: assignment_from_row,
}


def from_row(entity_type: Type, row: Dict[str, Any]) -> Any:
    """Build an entity of ``entity_type`` from a remote row."""
    return ROW_READERS[entity_type](row)
