from todo_api.validation import validate_new_todo, validate_todo_changes


def test_new_todo_defaults():
    result = validate_new_todo({"title": " Buy milk "})
    assert result.ok
    assert result.value.title == "Buy milk"
    assert result.value.description == ""
    assert result.value.is_completed is False


def test_new_todo_accepts_camel_case_flag():
    result = validate_new_todo({"title": "Done already", "isCompleted": True, "description": None})
    assert result.ok
    assert result.value.is_completed is True
    assert result.value.description == ""


def test_new_todo_missing_title():
    result = validate_new_todo({"description": "orphan"})
    assert not result.ok
    assert result.value is None
    assert result.errors == ("title: Title is required",)
    assert result.message == "Todo validation failed: title: Title is required"


def test_new_todo_reports_every_bad_field():
    result = validate_new_todo({"title": 42, "isCompleted": "maybe"})
    assert not result.ok
    assert len(result.errors) == 2
    assert result.errors[0] == "title: Title must be a string"
    assert result.errors[1].startswith("isCompleted:")


def test_non_object_payload():
    result = validate_new_todo(["title"])
    assert not result.ok
    assert result.errors == ("body: Request body must be a JSON object",)


def test_changes_only_include_supplied_fields():
    result = validate_todo_changes({"isCompleted": True})
    assert result.ok
    assert result.value.changes() == {"is_completed": True}


def test_changes_trim_title_and_allow_empty_payload():
    assert validate_todo_changes({"title": "  Renamed "}).value.changes() == {"title": "Renamed"}
    assert validate_todo_changes({}).value.changes() == {}


def test_changes_reject_blank_or_null_title():
    for title in ("", "   ", None):
        result = validate_todo_changes({"title": title})
        assert result.errors == ("title: Title is required",)


def test_changes_reject_null_flag():
    result = validate_todo_changes({"isCompleted": None})
    assert result.errors == ("isCompleted: isCompleted must be a boolean",)


def test_scalar_description_is_cast_to_text():
    assert validate_new_todo({"title": "x", "description": 5}).value.description == "5"
    assert validate_new_todo({"title": "x", "description": 2.5}).value.description == "2.5"
    assert validate_todo_changes({"description": False}).value.changes() == {"description": "false"}


def test_structured_description_is_rejected():
    result = validate_new_todo({"title": "x", "description": ["a", "b"]})
    assert not result.ok
    assert result.errors[0].startswith("description:")
