"""Unit tests for treeclassify.core.deferred: lazy, memoized references."""
from __future__ import annotations

import copy
import dataclasses
import pickle
import threading
import time
from dataclasses import dataclass
from typing import Optional

import pytest

from treeclassify import Deferred, follow_id, id_member


@dataclass
class Target:
    key: Optional[str] = id_member()
    other_key: Optional[str] = id_member()
    count: int = 0


@dataclass(frozen=True)
class FrozenTarget:
    key: Optional[str] = id_member()


@dataclass
class Owner:
    name: str = ""
    part: Optional[Deferred[Target]] = follow_id()


class Counter:
    def __init__(self, result: object = "value") -> None:
        self.calls = 0
        self.result = result

    def __call__(self) -> object:
        self.calls += 1
        return self.result


class TestEvaluation:
    def test_generator_is_not_run_until_read(self) -> None:
        generator = Counter()
        ref = Deferred("a", generator=generator)
        assert not ref.evaluated
        assert generator.calls == 0

    def test_generator_runs_at_most_once(self) -> None:
        generator = Counter()
        ref = Deferred("a", generator=generator)
        assert ref.value == "value"
        assert ref.value == "value"
        assert ref.evaluated
        assert generator.calls == 1

    def test_none_result_is_memoized(self) -> None:
        generator = Counter(result=None)
        ref = Deferred("a", generator=generator)
        assert ref.value is None
        assert ref.value is None
        assert generator.calls == 1

    def test_generator_error_propagates_and_can_retry(self) -> None:
        attempts = []

        def flaky() -> str:
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("boom")
            return "ok"

        ref = Deferred("a", generator=flaky)
        with pytest.raises(RuntimeError, match="boom"):
            ref.value
        assert not ref.evaluated
        assert ref.value == "ok"

    def test_resolved_constructor(self) -> None:
        ref = Deferred("a", 42)
        assert ref.evaluated
        assert ref.value == 42

    def test_resolved_constructor_accepts_none(self) -> None:
        ref = Deferred("a", None)
        assert ref.evaluated
        assert ref.value is None

    def test_needs_value_or_generator(self) -> None:
        with pytest.raises(TypeError):
            Deferred("a")

    def test_setter_replaces_value_and_drops_generator(self) -> None:
        generator = Counter()
        ref = Deferred("a", generator=generator)
        ref.value = "assigned"
        assert ref.evaluated
        assert ref.value == "assigned"
        assert generator.calls == 0

    def test_id_is_read_only(self) -> None:
        ref = Deferred("a", 1)
        assert ref.id == "a"
        with pytest.raises(AttributeError):
            ref.id = "b"  # type: ignore[misc]

    def test_repr(self) -> None:
        assert repr(Deferred("a", 1)) == "Deferred(id='a', resolved)"
        assert repr(Deferred("a", generator=Counter())) == "Deferred(id='a', unresolved)"


class TestIdBackfill:
    def test_generated_value_receives_id(self) -> None:
        ref = Deferred("chapter-7", generator=Target)
        assert ref.value.key == "chapter-7"
        assert ref.value.other_key == "chapter-7"

    def test_frozen_value_receives_id(self) -> None:
        assert Deferred("x", generator=FrozenTarget).value.key == "x"

    def test_resolved_value_is_left_alone(self) -> None:
        target = Target(key="own")
        assert Deferred("x", target).value.key == "own"

    def test_non_object_values_are_left_alone(self) -> None:
        assert Deferred("x", generator=lambda: [1, 2]).value == [1, 2]


class TestThreads:
    def test_concurrent_readers_share_one_evaluation(self) -> None:
        calls = []

        def slow() -> object:
            calls.append(1)
            time.sleep(0.05)
            return object()

        ref = Deferred("a", generator=slow)
        results: list[object] = []
        threads = [threading.Thread(target=lambda: results.append(ref.value)) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert len(results) == 8
        assert all(r is results[0] for r in results)


class TestCopying:
    def test_shallow_copy_shares_the_value(self) -> None:
        target = Target(count=1)
        clone = copy.copy(Deferred("a", target))
        assert clone.id == "a"
        assert clone.value is target

    def test_deep_copy_copies_the_value(self) -> None:
        target = Target(count=1)
        clone = copy.deepcopy(Deferred("a", target))
        assert clone.value == target
        assert clone.value is not target

    def test_deep_copy_of_unresolved_reference_evaluates_separately(self) -> None:
        generator = Counter()
        original = Deferred("a", generator=generator)
        clone = copy.deepcopy(original)
        assert not clone.evaluated
        assert clone.value == "value"
        assert not original.evaluated
        assert generator.calls == 1

    def test_owner_can_be_deep_copied(self) -> None:
        owner = Owner(name="o", part=Deferred("p1", Target(count=2)))
        clone = copy.deepcopy(owner)
        assert clone.part is not owner.part
        assert clone.part.value.count == 2

    def test_owner_converts_to_dict(self) -> None:
        owner = Owner(name="o", part=Deferred("p1", Target(count=2)))
        result = dataclasses.asdict(owner)
        assert result["name"] == "o"
        assert result["part"].id == "p1"

    def test_pickle_round_trip(self) -> None:
        restored = pickle.loads(pickle.dumps(Deferred("a", Target(key="a", count=3))))
        assert restored.evaluated
        assert restored.value == Target(key="a", count=3)
        restored.value = Target()
        assert restored.value == Target()


class TestEquality:
    def test_same_id_and_value_are_equal(self) -> None:
        assert Deferred("a", Target(count=1)) == Deferred("a", Target(count=1))
        assert hash(Deferred("a", 1)) == hash(Deferred("a", 2))

    def test_different_ids_are_not_equal(self) -> None:
        assert Deferred("a", 1) != Deferred("b", 1)

    def test_different_values_are_not_equal(self) -> None:
        assert Deferred("a", 1) != Deferred("a", 2)

    def test_comparison_evaluates_unresolved_references(self) -> None:
        generator = Counter()
        assert Deferred("a", generator=generator) == Deferred("a", "value")
        assert generator.calls == 1

    def test_owners_with_equal_references_are_equal(self) -> None:
        first = Owner(name="o", part=Deferred("p1", Target(key="p1", other_key="p1", count=2)))
        second = Owner(name="o", part=Deferred("p1", generator=lambda: Target(count=2)))
        assert first == second

    def test_not_equal_to_other_types(self) -> None:
        assert Deferred("a", 1) != 1
