# =============================================================================
# tests/unit/test_entities.py
# Unit Tests for entity dataclasses and partial updates
# =============================================================================

import pytest

from school_core.errors.exceptions import EntityValidationError
from school_core.models.entities import (
    Address,
    ClassGroup,
    ClassGroupUpdate,
    Project,
    ProjectCategory,
    ProjectOrigin,
    ProjectUpdate,
    SchoolProfile,
    is_local_id,
    new_local_id,
)


class TestLocalIds:

    def test_new_local_ids_are_unique_and_recognized(self):
        first, second = new_local_id(), new_local_id()

        assert first != second
        assert is_local_id(first)

    @pytest.mark.parametrize("value", [None, "", "42", "srv-local-1"])
    def test_other_ids_are_not_local(self, value):
        assert not is_local_id(value)


class TestProject:

    def test_enum_values_are_coerced(self):
        project = Project(name="Coral", category="cultural", origin="externo")

        assert project.category is ProjectCategory.CULTURAL
        assert project.origin is ProjectOrigin.EXTERNAL

    def test_invalid_category_raises_validation_error(self):
        with pytest.raises(EntityValidationError) as exc_info:
            Project(name="Coral", category="musica")

        assert exc_info.value.details == {"entity": "project", "field": "category", "actual": "musica"}

    def test_invalid_origin_raises_validation_error(self):
        with pytest.raises(EntityValidationError) as exc_info:
            Project(name="Coral", origin=None)

        assert exc_info.value.details["field"] == "origin"

    def test_non_string_description_is_invalid(self):
        with pytest.raises(EntityValidationError):
            Project(name="Coral", description=3).validate()

    def test_empty_name_is_invalid(self):
        with pytest.raises(EntityValidationError) as exc_info:
            Project(name="   ").validate()

        assert exc_info.value.details["field"] == "name"

    def test_dict_round_trip_keeps_pending_flag(self):
        project = Project(name="Coral", id="local-1", pending_sync=True)

        data = project.to_dict()

        assert data["category"] == "pedagogico"
        assert Project.from_dict(data) == project


class TestClassGroup:

    @pytest.mark.parametrize("capacity", [-1, 2.5, True, "10"])
    def test_capacity_must_be_non_negative_int(self, capacity):
        with pytest.raises(EntityValidationError):
            ClassGroup(project_id="p", name="6A", capacity=capacity).validate()

    def test_zero_capacity_is_valid(self):
        ClassGroup(project_id="p", name="6A", capacity=0).validate()

    @pytest.mark.parametrize("project_id", [None, "", 12])
    def test_project_reference_must_be_a_non_empty_string(self, project_id):
        with pytest.raises(EntityValidationError) as exc_info:
            ClassGroup(project_id=project_id, name="6A").validate()

        assert exc_info.value.details["field"] == "project_id"


class TestSchoolProfile:

    def test_from_dict_ignores_unknown_keys(self):
        profile = SchoolProfile.from_dict({"name": "Escola", "legacy": 1, "address": {"city": "Recife"}})

        assert profile.name == "Escola"
        assert profile.address == Address(city="Recife")
        assert profile.id is None

    def test_address_must_be_an_object(self):
        with pytest.raises(TypeError):
            SchoolProfile.from_dict({"name": "Escola", "address": "Rua das Flores"})

    def test_empty_profile_is_valid(self):
        SchoolProfile().validate()

    @pytest.mark.parametrize("name, value", [("name", 7), ("grades", {}), ("infrastructure", []), ("id", 5)])
    def test_wrong_field_types_are_invalid(self, name, value):
        profile = SchoolProfile()
        setattr(profile, name, value)

        with pytest.raises(EntityValidationError) as exc_info:
            profile.validate()

        assert exc_info.value.details["field"] == name

    def test_defaults_are_independent(self):
        first, second = SchoolProfile(), SchoolProfile()
        first.infrastructure["totalSalas"] = 12

        assert second.infrastructure["totalSalas"] == 0


class TestPartialUpdates:

    def test_changes_skip_unset_fields(self):
        assert ProjectUpdate(active=False).changes() == {"active": False}

    def test_bogus_category_update_raises_validation_error(self):
        project = Project(name="Coral", id="p1")

        with pytest.raises(EntityValidationError) as exc_info:
            ProjectUpdate(category="bogus").apply_to(project)

        assert exc_info.value.details["field"] == "category"
        assert project.category is ProjectCategory.PEDAGOGICAL

    def test_apply_returns_new_object(self):
        project = Project(name="Coral", id="p1")

        updated = ProjectUpdate(name="Coral Jovem", category="social").apply_to(project)

        assert project.name == "Coral"
        assert updated.name == "Coral Jovem"
        assert updated.category is ProjectCategory.SOCIAL
        assert updated.id == "p1"

    def test_class_group_update(self):
        group = ClassGroup(project_id="p1", name="6A", capacity=20, id="c1")

        updated = ClassGroupUpdate(capacity=0).apply_to(group)

        assert updated.capacity == 0
        assert updated.name == "6A"
