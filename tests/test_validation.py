import pytest

from errors import RequestValidationError
from validation import DEFAULT_SIZE, URL_MESSAGE, ValidatedRequest, validate


def _issues(payload):
    with pytest.raises(RequestValidationError) as excinfo:
        validate(payload)
    return excinfo.value


def test_valid_request_is_normalized():
    result = validate({"link": "  https://example.com/path?q=1  ", "size": 256})
    assert result == ValidatedRequest(text="https://example.com/path?q=1", pixel_size=256)


def test_size_defaults_when_omitted():
    assert validate({"link": "https://example.com"}).pixel_size == DEFAULT_SIZE == 320


def test_null_size_counts_as_omitted():
    assert validate({"link": "https://example.com", "size": None}).pixel_size == 320


@pytest.mark.parametrize("size", [128, 1024, "512", " 600 ", 256.0, "1e3"])
def test_accepted_sizes(size):
    assert 128 <= validate({"link": "https://example.com", "size": size}).pixel_size <= 1024


def test_unknown_fields_are_ignored():
    assert validate({"link": "http://localhost:8080", "color": "red"}).text == "http://localhost:8080"


@pytest.mark.parametrize(
    "link", ["", "   ", "not a url", "example.com", "https://", "mailto:someone@example.com"]
)
def test_invalid_links(link):
    error = _issues({"link": link, "size": 320})
    assert error.field_errors == {"link": [URL_MESSAGE]}
    assert error.issues[0].code == "invalid_string"


def test_non_string_link():
    error = _issues({"link": 42})
    assert error.issues[0].path == "link"
    assert error.issues[0].code == "invalid_type"


def test_missing_link():
    error = _issues({"size": 256})
    assert error.field_errors == {"link": ["Required"]}


@pytest.mark.parametrize(
    "size, message, code",
    [
        (0, "Minimum size is 128", "too_small"),
        (127, "Minimum size is 128", "too_small"),
        (-5, "Minimum size is 128", "too_small"),
        (1025, "Maximum size is 1024", "too_big"),
        (5000, "Maximum size is 1024", "too_big"),
        (3.5, "Size must be an integer", "invalid_type"),
        ("abc", "Size must be a number", "invalid_type"),
        ("", "Size must be a number", "invalid_type"),
        (True, "Size must be a number", "invalid_type"),
        ([256], "Size must be a number", "invalid_type"),
    ],
)
def test_invalid_sizes(size, message, code):
    error = _issues({"link": "https://example.com", "size": size})
    assert error.field_errors == {"size": [message]}
    assert error.issues[0].code == code


def test_all_field_errors_are_collected():
    error = _issues({"link": "", "size": 5000})
    assert error.field_errors == {
        "link": [URL_MESSAGE],
        "size": ["Maximum size is 1024"],
    }
    assert [issue.path for issue in error.issues] == ["link", "size"]


@pytest.mark.parametrize("payload", [None, [], "https://example.com", 12])
def test_non_object_body(payload):
    error = _issues(payload)
    assert error.field_errors == {}
    assert error.issues[0].path == ""
    assert error.issues[0].code == "invalid_type"


def test_error_response_shape():
    body = _issues({"link": "nope", "size": 64}).to_dict()
    assert body["message"] == "Validation error"
    assert body["issues"] == [
        {"path": "link", "message": URL_MESSAGE, "code": "invalid_string"},
        {"path": "size", "message": "Minimum size is 128", "code": "too_small"},
    ]
    assert body["fieldErrors"] == {"link": [URL_MESSAGE], "size": ["Minimum size is 128"]}
