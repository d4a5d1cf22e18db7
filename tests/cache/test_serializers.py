import pytest

from schoolms.cache.serializers import (
    SerializationFormat,
    deserialize_value,
    is_json_serializable,
    serialize_value,
)
from schoolms.common.exceptions import CacheBackendError
from schoolms.schemas.people import StudentDto


def test_plain_data_is_json():
    payload = serialize_value({"id": 5, "tags": ["a", "b"]})

    assert payload.startswith(b"j")
    assert deserialize_value(payload) == {"id": 5, "tags": ["a", "b"]}


def test_models_are_pickled():
    student = StudentDto(id=1, first_name="An", last_name="Le")

    payload = serialize_value(student)

    assert payload.startswith(b"p")
    assert deserialize_value(payload) == student


def test_is_json_serializable():
    assert is_json_serializable([1, "a", None, {"k": 1.5}])
    assert not is_json_serializable({1: "int key"})
    assert not is_json_serializable(StudentDto(id=1, first_name="A", last_name="B"))


def test_forced_json_failure_raises():
    with pytest.raises(CacheBackendError):
        serialize_value({1, 2}, format=SerializationFormat.JSON)


@pytest.mark.parametrize("payload", [b"", b"x{}", b"p-not-a-pickle", b"j{broken"])
def test_bad_payload_raises(payload):
    with pytest.raises(CacheBackendError):
        deserialize_value(payload)
