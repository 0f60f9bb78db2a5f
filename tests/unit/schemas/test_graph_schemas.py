"""
Unit tests for user input validation and graph read models.
"""

import pytest

from app.core.exceptions import ValidationError
from app.schemas.graph import (
    DeleteStatus,
    DeleteUserResult,
    FriendshipView,
    UserRecord,
    UserView,
)
from app.services.graph_store import validate_user_fields


@pytest.mark.unit
class TestUserFieldValidation:
    """Test validate_user_fields normalisation and errors."""

    def test_valid_fields_are_normalised(self):
        fields = validate_user_fields(
            "  Alice  ", 28, ["Reading", " Gaming ", "Reading", ""]
        )

        assert fields.username == "Alice"
        assert fields.age == 28
        assert fields.hobbies == ["Reading", "Gaming"]

    def test_missing_hobbies_default_to_empty(self):
        assert validate_user_fields("Bob", 40, None).hobbies == []

    @pytest.mark.parametrize("username", ["", "   ", "x" * 51, None, 42])
    def test_invalid_username(self, username):
        with pytest.raises(ValidationError) as exc_info:
            validate_user_fields(username, 30, [])

        assert exc_info.value.status_code == 400
        assert exc_info.value.details["fields"] == ["username"]

    def test_username_at_max_length(self):
        assert validate_user_fields("x" * 50, 30, []).username == "x" * 50

    @pytest.mark.parametrize("age", [0, 151, -5, "30", 30.5, True, None])
    def test_invalid_age(self, age):
        with pytest.raises(ValidationError) as exc_info:
            validate_user_fields("Alice", age, [])

        assert exc_info.value.details["fields"] == ["age"]

    @pytest.mark.parametrize("age", [1, 150])
    def test_age_bounds_inclusive(self, age):
        assert validate_user_fields("Alice", age, []).age == age

    def test_invalid_hobbies(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_user_fields("Alice", 30, ["Reading", 7])

        assert exc_info.value.details["fields"] == ["hobbies.1"]

    def test_all_errors_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_user_fields("", 0, [])

        assert set(exc_info.value.details["fields"]) == {"username", "age"}


@pytest.mark.unit
class TestReadModels:
    """Test read model helpers."""

    def test_user_view_to_record(self):
        view = UserView(
            id="u1",
            username="Alice",
            age=28,
            hobbies=["Reading"],
            friends=["u2"],
            popularity_score=1.5,
        )

        record = view.to_record()

        assert record == UserRecord(id="u1", username="Alice", age=28, hobbies=("Reading",))

    def test_friendship_view_ids(self):
        friendship = FriendshipView(id=1, user_id_1="a", user_id_2="b")

        assert friendship.edge_id == "a-b"
        assert friendship.pair == ("a", "b")
        assert friendship.created is False

    def test_delete_result_ok(self):
        assert DeleteUserResult(status=DeleteStatus.DELETED).ok
        assert not DeleteUserResult(status=DeleteStatus.NOT_FOUND).ok
