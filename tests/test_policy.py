import pytest
from pydantic import ValidationError
from weakcoll.core.policy import BagPolicy, CleanPolicy, HashPolicy, SequencePolicy


def test_defaults():
    assert CleanPolicy().auto_clean_threshold is None
    assert not SequencePolicy().trim_excess_during_clean
    assert SequencePolicy().extra_trim_capacity == 0
    assert HashPolicy().sweep_on_encounter


@pytest.mark.parametrize("threshold", [0, -3])
def test_threshold_must_be_positive(threshold):
    with pytest.raises(ValidationError):
        CleanPolicy(auto_clean_threshold=threshold)


def test_assignment_is_validated():
    policy = SequencePolicy()
    with pytest.raises(ValidationError):
        policy.extra_trim_capacity = -1
    policy.auto_clean_threshold = 10
    policy.auto_clean_threshold = None
    assert policy.auto_clean_threshold is None


def test_unknown_settings_are_rejected():
    with pytest.raises(ValidationError):
        HashPolicy(sweep_on_enumerate=False)


def test_bag_policy_headroom():
    assert BagPolicy().extra_trim_capacity == 0
    assert BagPolicy().sweep_on_encounter
    with pytest.raises(ValidationError):
        BagPolicy(extra_trim_capacity=-2)
