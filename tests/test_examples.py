import random

import pytest

from rx_intake.codec.decoder import to_flat_record
from rx_intake.commons.exceptions import MalformedInputError
from rx_intake.commons.types import CanonicalExampleRecord
from rx_intake.services.examples import get_example, load_examples
from rx_intake.validation.validators import validate


def test_library_has_five_examples():
    examples = load_examples()
    assert len(examples) == 5
    assert [e.medication.name for e in examples] == [
        "Humira",
        "Enbrel",
        "Stelara",
        "Remicade",
        "Cosentyx",
    ]


def test_yaml_strings_keep_leading_zeros():
    first = load_examples()[0]
    assert first.medication.ndc == "00002-7510-02"
    assert first.insurance.bin == "004682"
    assert first.patient.zip_code == "10001"


def test_every_example_passes_validation():
    for example in load_examples():
        assert validate(to_flat_record(example)) == {}


def test_get_example_by_index():
    assert get_example(2).medication.name == "Stelara"


def test_get_example_random_is_seedable():
    a = get_example(rng=random.Random(7))
    b = get_example(rng=random.Random(7))
    assert isinstance(a, CanonicalExampleRecord)
    assert a == b


def test_get_example_from_given_pool():
    pool = load_examples()[:1]
    assert get_example(examples=pool).patient.id == "PAT001"


def test_empty_pool_raises():
    with pytest.raises(LookupError):
        get_example(examples=[])


def test_bad_library_file(tmp_path):
    path = tmp_path / "examples.yaml"
    path.write_text("examples:\n  - patient: {id: X}\n", encoding="utf-8")
    with pytest.raises(MalformedInputError):
        load_examples(path)


@pytest.mark.parametrize("index", [5, 9, -1])
def test_index_out_of_range(index):
    with pytest.raises(LookupError) as exc_info:
        get_example(index)
    assert "5 examples" in str(exc_info.value)
