# =============================================================================
# school_core/stores/entity_stores.py
# In-memory entity collections with referential integrity
# =============================================================================
"""
Entity stores.

``EntityStores`` owns the profile slot and the three collections and is
the only place that mutates them. Foreign keys are checked before
anything is applied, and deletes cascade in a single step so no reader
ever sees a class group without its project or an assignment without its
class group.

Collections are small (one school), so every lookup and cascade is a
linear scan; there is no index.
"""

from __future__ import annotations
import copy
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, List, Optional, Set, TypeVar

from school_core.errors.exceptions import EntityNotFound, ReferentialViolation
from school_core.logging import get_logger
from school_core.models.entities import (
    Assignment,
    AssignmentUpdate,
    ClassGroup,
    ClassGroupUpdate,
    ProfileUpdate,
    Project,
    ProjectUpdate,
    SchoolProfile,
)

logger = get_logger(__name__)

T = TypeVar("T")


class CollectionStore(Generic[T]):
    """Ordered list of entities keyed by ``id``. Hands out copies only."""

    entity_name = "entity"

    def __init__(self, items: Optional[Iterable[T]] = None):
        self._items: List[T] = []
        if items:
            self.replace_all(items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, entity_id: object) -> bool:
        return self._find(entity_id) is not None

    def _find(self, entity_id) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == entity_id:
                return index
        return None

    def _require(self, entity_id) -> int:
        index = self._find(entity_id)
        if index is None:
            raise EntityNotFound(
                f"{self.entity_name} {entity_id} does not exist",
                entity=self.entity_name,
                entity_id=entity_id,
            )
        return index

    def _sort(self) -> None:
        pass

    def snapshot(self) -> List[T]:
        """Deep copies of every member, in collection order."""
        return copy.deepcopy(self._items)

    def get(self, entity_id) -> Optional[T]:
        index = self._find(entity_id)
        return copy.deepcopy(self._items[index]) if index is not None else None

    def require(self, entity_id) -> T:
        return copy.deepcopy(self._items[self._require(entity_id)])

    def ids(self) -> Set[str]:
        return {item.id for item in self._items}

    def add(self, entity: T) -> str:
        if entity.id is None:
            raise ValueError(f"{self.entity_name} needs an id before it is stored")
        self._items.append(copy.deepcopy(entity))
        self._sort()
        return entity.id

    def put(self, entity: T) -> None:
        """Replace the stored member that has the same id."""
        self._items[self._require(entity.id)] = copy.deepcopy(entity)
        self._sort()

    def set_pending(self, entity_id, pending: bool) -> None:
        index = self._find(entity_id)
        if index is not None:
            self._items[index].pending_sync = pending

    def remove_where(self, predicate: Callable[[T], bool]) -> List[T]:
        removed = [item for item in self._items if predicate(item)]
        self._items = [item for item in self._items if not predicate(item)]
        return removed

    def replace_all(self, items: Iterable[T]) -> None:
        self._items = copy.deepcopy(list(items))
        self._sort()


class ProjectStore(CollectionStore[Project]):
    """Projects, kept ordered by name."""

    entity_name = "project"

    def _sort(self) -> None:
        self._items.sort(key=lambda p: p.name.casefold())


class ClassGroupStore(CollectionStore[ClassGroup]):
    entity_name = "class_group"


class AssignmentStore(CollectionStore[Assignment]):
    entity_name = "assignment"


class ProfileStore:
    """Holds at most one school profile."""

    def __init__(self, profile: Optional[SchoolProfile] = None):
        self._profile = copy.deepcopy(profile)

    def get(self) -> Optional[SchoolProfile]:
        return copy.deepcopy(self._profile)

    def current(self) -> SchoolProfile:
        """The stored profile, or an empty one if none was loaded yet."""
        return self.get() or SchoolProfile()

    def set(self, profile: Optional[SchoolProfile]) -> None:
        self._profile = copy.deepcopy(profile)

    def assign_id(self, profile_id: str) -> None:
        if self._profile is not None and self._profile.id is None:
            self._profile.id = profile_id


@dataclass
class Removal:
    """Everything a delete took out of the stores."""
    projects: List[Project] = field(default_factory=list)
    class_groups: List[ClassGroup] = field(default_factory=list)
    assignments: List[Assignment] = field(default_factory=list)


class EntityStores:
    """
    The four stores plus the rules that span them.

    Usage:
        stores = EntityStores()
        stores.create_project(Project(name="Horta", id="p1"))
        stores.create_class_group(ClassGroup(project_id="p1", name="6A", id="c1"))
        removal = stores.delete_project("p1")  # also removes class group c1
    """

    def __init__(self):
        self.profile = ProfileStore()
        self.projects = ProjectStore()
        self.class_groups = ClassGroupStore()
        self.assignments = AssignmentStore()

    def load(
        self,
        profile: Optional[SchoolProfile],
        projects: Iterable[Project],
        class_groups: Iterable[ClassGroup],
        assignments: Iterable[Assignment],
    ) -> None:
        """Replace the whole state, e.g. after bootstrap."""
        self.profile.set(profile)
        self.projects.replace_all(projects)
        self.class_groups.replace_all(class_groups)
        self.assignments.replace_all(assignments)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def _check_project_ref(self, entity: str, project_id) -> None:
        if project_id not in self.projects:
            raise ReferentialViolation(
                f"{entity} references unknown project {project_id}",
                entity=entity,
                field="project_id",
                value=project_id,
            )

    def _check_class_group_ref(self, entity: str, class_group_id) -> None:
        if class_group_id not in self.class_groups:
            raise ReferentialViolation(
                f"{entity} references unknown class group {class_group_id}",
                entity=entity,
                field="class_group_id",
                value=class_group_id,
            )

    def validate_project(self, project: Project) -> None:
        project.validate()

    def validate_class_group(self, class_group: ClassGroup) -> None:
        class_group.validate()
        self._check_project_ref("class_group", class_group.project_id)

    def validate_assignment(self, assignment: Assignment) -> None:
        assignment.validate()
        self._check_project_ref("assignment", assignment.project_id)
        self._check_class_group_ref("assignment", assignment.class_group_id)

    # =========================================================================
    # CREATE
    # =========================================================================

    def create_project(self, project: Project) -> str:
        self.validate_project(project)
        return self.projects.add(project)

    def create_class_group(self, class_group: ClassGroup) -> str:
        self.validate_class_group(class_group)
        return self.class_groups.add(class_group)

    def create_assignment(self, assignment: Assignment) -> str:
        self.validate_assignment(assignment)
        return self.assignments.add(assignment)

    # =========================================================================
    # UPDATE
    # =========================================================================

    def update_profile(self, changes: ProfileUpdate) -> SchoolProfile:
        updated = changes.apply_to(self.profile.current())
        self.profile.set(updated)
        return updated

    def update_project(self, project_id: str, changes: ProjectUpdate) -> Project:
        updated = changes.apply_to(self.projects.require(project_id))
        self.validate_project(updated)
        self.projects.put(updated)
        return updated

    def update_class_group(self, class_group_id: str, changes: ClassGroupUpdate) -> ClassGroup:
        updated = changes.apply_to(self.class_groups.require(class_group_id))
        self.validate_class_group(updated)
        self.class_groups.put(updated)
        return updated

    def update_assignment(self, assignment_id: str, changes: AssignmentUpdate) -> Assignment:
        updated = changes.apply_to(self.assignments.require(assignment_id))
        self.validate_assignment(updated)
        self.assignments.put(updated)
        return updated

    # =========================================================================
    # DELETE (CASCADING)
    # =========================================================================

    def delete_project(self, project_id: str) -> Removal:
        """Remove a project, its class groups and every assignment under either."""
        project = self.projects.require(project_id)
        group_ids = {
            g.id for g in self.class_groups.snapshot() if g.project_id == project_id
        }

        removal = Removal(
            projects=self.projects.remove_where(lambda p: p.id == project_id),
            class_groups=self.class_groups.remove_where(lambda g: g.id in group_ids),
            assignments=self.assignments.remove_where(
                lambda a: a.project_id == project_id or a.class_group_id in group_ids
            ),
        )
        logger.debug(
            f"Deleted project {project.id} with {len(removal.class_groups)} class groups "
            f"and {len(removal.assignments)} assignments"
        )
        return removal

    def delete_class_group(self, class_group_id: str) -> Removal:
        """Remove a class group and its assignments."""
        self.class_groups.require(class_group_id)
        return Removal(
            class_groups=self.class_groups.remove_where(lambda g: g.id == class_group_id),
            assignments=self.assignments.remove_where(
                lambda a: a.class_group_id == class_group_id
            ),
        )

    def delete_assignment(self, assignment_id: str) -> Removal:
        self.assignments.require(assignment_id)
        return Removal(
            assignments=self.assignments.remove_where(lambda a: a.id == assignment_id),
        )
