# =============================================================================
# school_core/models/entities.py
# Domain entities: school profile, projects, class groups, assignments
# =============================================================================
"""
Entity dataclasses and their typed partial-update counterparts.

Nested profile payloads (grades, shifts, special education support,
infrastructure) are kept as plain dicts/lists: they travel to Supabase as
JSON columns and the data layer never looks inside them.
"""

from __future__ import annotations
import copy
import uuid
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from school_core.errors.exceptions import EntityValidationError

T = TypeVar("T")

LOCAL_ID_PREFIX = "local-"


class ProjectCategory(Enum):
    """Project category tags."""
    PEDAGOGICAL = "pedagogico"
    CULTURAL = "cultural"
    SPORTS = "esportivo"
    SCIENTIFIC = "cientifico"
    TECHNOLOGY = "tecnologico"
    SOCIAL = "social"
    ENVIRONMENTAL = "ambiental"
    OTHER = "outro"


class ProjectOrigin(Enum):
    """Whether the school runs the project itself or hosts an external one."""
    OWN = "proprio"
    EXTERNAL = "externo"


def new_local_id() -> str:
    """Id for an entity created while the remote store was unreachable."""
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"


def is_local_id(entity_id: Optional[str]) -> bool:
    return bool(entity_id) and str(entity_id).startswith(LOCAL_ID_PREFIX)


# =============================================================================
# DEFAULT PAYLOADS
# =============================================================================

def default_special_education() -> Dict[str, Any]:
    return {
        "possui": False,
        "salaRecursos": False,
        "salaRecursosQuantidade": 0,
        "deficienciasAtendidas": [],
        "profissionaisAEE": 0,
        "observacoes": "",
    }


def default_infrastructure() -> Dict[str, Any]:
    return {
        "acessibilidade": {
            "rampa": False,
            "elevador": False,
            "banheiroAdaptado": False,
            "pisoTatil": False,
            "sinalizacaoBraille": False,
        },
        "espacos": {
            "salaRecursos": False,
            "salaRecursosQuantidade": 0,
            "laboratorioInformatica": False,
            "laboratorioCiencias": False,
            "biblioteca": False,
            "quadraEsportiva": False,
            "quadraCoberta": False,
            "auditorio": False,
            "refeitorio": False,
            "parqueInfantil": False,
        },
        "totalSalas": 0,
    }


# =============================================================================
# SERIALIZATION HELPERS
# =============================================================================

def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def entity_to_dict(entity: Any) -> Dict[str, Any]:
    """JSON-safe dict of a dataclass entity (enums become their values)."""
    return _plain(asdict(entity))


def _known_fields(cls: Type[T], data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


def _check_count(entity: str, name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise EntityValidationError(
            f"{name} must be a non-negative integer",
            entity=entity,
            field=name,
            actual=value,
        )


def _check_text(entity: str, name: str, value: Any) -> None:
    if not isinstance(value, str) or not value.strip():
        raise EntityValidationError(
            f"{name} must not be empty",
            entity=entity,
            field=name,
            actual=value,
        )


def _check_type(entity: str, name: str, value: Any, expected: type) -> None:
    if not isinstance(value, expected):
        raise EntityValidationError(
            f"{name} must be {expected.__name__}, got {type(value).__name__}",
            entity=entity,
            field=name,
            actual=value,
        )


def _coerce_enum(entity: str, name: str, enum_cls: Type[Enum], value: Any) -> Enum:
    try:
        return enum_cls(value)
    except ValueError:
        raise EntityValidationError(
            f"{value!r} is not a valid {name}",
            entity=entity,
            field=name,
            actual=value,
        ) from None


# =============================================================================
# SCHOOL PROFILE
# =============================================================================

@dataclass
class Address:
    """Postal address of the school."""
    street: str = ""
    number: str = ""
    complement: str = ""
    district: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Address:
        if data is not None and not isinstance(data, dict):
            raise TypeError(f"address must be an object, got {type(data).__name__}")
        return cls(**_known_fields(cls, data or {}))


@dataclass
class SchoolProfile:
    """
    The single institution record.

    ``id`` stays None until the first insert into Supabase succeeds.
    """
    name: str = ""
    cnpj: str = ""
    inep_code: str = ""
    email: str = ""
    phone: str = ""
    address: Address = field(default_factory=Address)
    teaching_types: List[str] = field(default_factory=list)
    grades: List[Dict[str, Any]] = field(default_factory=list)
    shifts: List[Dict[str, Any]] = field(default_factory=list)
    special_education: Dict[str, Any] = field(default_factory=default_special_education)
    infrastructure: Dict[str, Any] = field(default_factory=default_infrastructure)
    principal: str = ""
    vice_principal: str = ""
    id: Optional[str] = None

    TEXT_FIELDS = ("name", "cnpj", "inep_code", "email", "phone", "principal", "vice_principal")

    def validate(self) -> None:
        """Field types only; an empty profile is valid."""
        for name in self.TEXT_FIELDS:
            _check_type("profile", name, getattr(self, name), str)
        _check_type("profile", "address", self.address, Address)
        for name in ("teaching_types", "grades", "shifts"):
            _check_type("profile", name, getattr(self, name), list)
        for name in ("special_education", "infrastructure"):
            _check_type("profile", name, getattr(self, name), dict)
        if self.id is not None:
            _check_type("profile", "id", self.id, str)

    def to_dict(self) -> Dict[str, Any]:
        return entity_to_dict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SchoolProfile:
        data = _known_fields(cls, copy.deepcopy(data))
        data["address"] = Address.from_dict(data.get("address"))
        return cls(**data)


# =============================================================================
# PROJECTS, CLASS GROUPS, ASSIGNMENTS
# =============================================================================

@dataclass
class Project:
    name: str
    description: str = ""
    category: ProjectCategory = ProjectCategory.PEDAGOGICAL
    origin: ProjectOrigin = ProjectOrigin.OWN
    active: bool = True
    id: Optional[str] = None
    pending_sync: bool = False

    def __post_init__(self):
        self.category = _coerce_enum("project", "category", ProjectCategory, self.category)
        self.origin = _coerce_enum("project", "origin", ProjectOrigin, self.origin)

    def validate(self) -> None:
        _check_text("project", "name", self.name)
        _check_type("project", "description", self.description, str)
        _check_type("project", "active", self.active, bool)

    def to_dict(self) -> Dict[str, Any]:
        return entity_to_dict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Project:
        return cls(**_known_fields(cls, data))


@dataclass
class ClassGroup:
    """A class (turma) enrolled in a project."""
    project_id: str
    name: str
    description: str = ""
    capacity: int = 0
    id: Optional[str] = None
    pending_sync: bool = False

    def validate(self) -> None:
        _check_text("class_group", "project_id", self.project_id)
        _check_text("class_group", "name", self.name)
        _check_type("class_group", "description", self.description, str)
        _check_count("class_group", "capacity", self.capacity)

    def to_dict(self) -> Dict[str, Any]:
        return entity_to_dict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ClassGroup:
        return cls(**_known_fields(cls, data))


@dataclass
class Assignment:
    """A teacher assigned to teach a number of lessons to a project class group."""
    project_id: str
    class_group_id: str
    teacher_name: str
    lessons: int = 0
    id: Optional[str] = None
    pending_sync: bool = False

    def validate(self) -> None:
        _check_text("assignment", "project_id", self.project_id)
        _check_text("assignment", "class_group_id", self.class_group_id)
        _check_text("assignment", "teacher_name", self.teacher_name)
        _check_count("assignment", "lessons", self.lessons)

    def to_dict(self) -> Dict[str, Any]:
        return entity_to_dict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Assignment:
        return cls(**_known_fields(cls, data))


# =============================================================================
# TYPED PARTIAL UPDATES
# =============================================================================

class _Update:
    """Fields left as None are not touched."""

    def changes(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def apply_to(self, entity: T) -> T:
        """Return a copy of ``entity`` with the set fields replaced."""
        updated = copy.deepcopy(entity)
        for name, value in self.changes().items():
            setattr(updated, name, copy.deepcopy(value))
        if hasattr(updated, "__post_init__"):
            updated.__post_init__()
        return updated


@dataclass
class ProjectUpdate(_Update):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ProjectCategory] = None
    origin: Optional[ProjectOrigin] = None
    active: Optional[bool] = None


@dataclass
class ClassGroupUpdate(_Update):
    project_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = None


@dataclass
class AssignmentUpdate(_Update):
    project_id: Optional[str] = None
    class_group_id: Optional[str] = None
    teacher_name: Optional[str] = None
    lessons: Optional[int] = None


@dataclass
class ProfileUpdate(_Update):
    name: Optional[str] = None
    cnpj: Optional[str] = None
    inep_code: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None
    teaching_types: Optional[List[str]] = None
    grades: Optional[List[Dict[str, Any]]] = None
    shifts: Optional[List[Dict[str, Any]]] = None
    special_education: Optional[Dict[str, Any]] = None
    infrastructure: Optional[Dict[str, Any]] = None
    principal: Optional[str] = None
    vice_principal: Optional[str] = None
