import copy
import json
import pickle

from tabular_pipeline.core.dataset import MISSING, Missing, is_missing
from tabular_pipeline.core.dataset.missing import is_json_missing


def test_missing_is_singleton():
    assert Missing() is MISSING
    assert copy.copy(MISSING) is MISSING
    assert copy.deepcopy([MISSING])[0] is MISSING
    assert pickle.loads(pickle.dumps(MISSING)) is MISSING


def test_missing_equals_only_itself():
    assert MISSING == MISSING
    for other in (None, 0, "", False, float("nan"), {"$missing": True}):
        assert MISSING != other
        assert not is_missing(other)


def test_missing_is_falsy_and_hashable():
    assert not MISSING
    assert {MISSING: 1}[MISSING] == 1
    assert repr(MISSING) == "MISSING"


def test_missing_json_form():
    encoded = json.dumps(MISSING.to_json())
    assert json.loads(encoded) == {"$missing": True}
    assert is_json_missing(json.loads(encoded))
    assert not is_json_missing({"$missing": False})
