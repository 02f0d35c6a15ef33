from pydantic import BaseModel, ConfigDict, NonNegativeInt, PositiveInt


class CleanPolicy(BaseModel):
    """Settings that drive when and how a container sweeps stale entries."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    # None disables automatic cleaning.
    auto_clean_threshold: PositiveInt | None = None
    trim_excess_during_clean: bool = False


class SequencePolicy(CleanPolicy):
    extra_trim_capacity: NonNegativeInt = 0


class HashPolicy(CleanPolicy):
    # Drop stale entries met by lookups, removals and enumeration.
    sweep_on_encounter: bool = True


class BagPolicy(HashPolicy):
    extra_trim_capacity: NonNegativeInt = 0
