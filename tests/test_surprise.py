"""
Surprise Engine Tests

Safe set kept in index order, a fixed surprise quota at fixed positions,
strategy fallbacks and short pools.
"""

import random

import pytest

from engine.models.config import EngineConfig
from engine.models.profile import EmotionalProfile
from engine.models.recommendation import SearchHit
from engine.stages.surprise import STRATEGY_ORDER, inject_surprises

from .fakes import build_catalog

ONLY_WILDCARD = dict(weight_controlled_chaos=0.0, weight_adjacent_discovery=0.0, weight_wildcard=1.0)
ONLY_ADJACENT = dict(weight_controlled_chaos=0.0, weight_adjacent_discovery=1.0, weight_wildcard=0.0)


def _candidates(n: int):
    return [SearchHit(score=round(0.99 - i * 0.01, 4), **item) for i, item in enumerate(build_catalog(n))]


class TestQuotaAndPositions:

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = EngineConfig()
        self.profile = EmotionalProfile()
        self.candidates = _candidates(30)

    def test_final_list_shape(self):
        final = inject_surprises(self.candidates, self.profile, self.config, random.Random(7))
        assert len(final) == self.config.safe_count + self.config.surprise_quota
        assert [i for i, r in enumerate(final) if r.is_surprise] == [3, 7]

    def test_safe_set_keeps_index_order(self):
        final = inject_surprises(self.candidates, self.profile, self.config, random.Random(7))
        safe_ids = [r.item_id for r in final if not r.is_surprise]
        assert safe_ids == [c.item_id for c in self.candidates[:10]]

    def test_surprises_come_from_pool_without_duplicates(self):
        final = inject_surprises(self.candidates, self.profile, self.config, random.Random(7))
        pool_ids = {c.item_id for c in self.candidates[10:]}
        surprises = [r for r in final if r.is_surprise]
        assert all(r.item_id in pool_ids for r in surprises)
        assert len({r.item_id for r in final}) == len(final)

    def test_surprises_explained(self):
        final = inject_surprises(self.candidates, self.profile, self.config, random.Random(7))
        for rec in final:
            if rec.is_surprise:
                assert rec.strategy in STRATEGY_ORDER
                assert rec.surprise_reason
            else:
                assert rec.strategy is None
                assert rec.surprise_reason is None

    def test_same_seed_same_list(self):
        a = inject_surprises(self.candidates, self.profile, self.config, random.Random("s:0"))
        b = inject_surprises(self.candidates, self.profile, self.config, random.Random("s:0"))
        assert a == b


class TestShortPools:

    @pytest.fixture(autouse=True)
    def setup(self):
        self.config = EngineConfig()
        self.profile = EmotionalProfile()

    def test_one_extra_candidate_one_surprise(self):
        final = inject_surprises(_candidates(11), self.profile, self.config, random.Random(1))
        assert len(final) == 11
        assert sum(r.is_surprise for r in final) == 1

    def test_no_pool_no_surprises(self):
        candidates = _candidates(10)
        final = inject_surprises(candidates, self.profile, self.config, random.Random(1))
        assert [r.item_id for r in final] == [c.item_id for c in candidates]
        assert not any(r.is_surprise for r in final)

    def test_fewer_than_safe_count(self):
        final = inject_surprises(_candidates(4), self.profile, self.config, random.Random(1))
        assert len(final) == 4

    def test_empty(self):
        assert inject_surprises([], self.profile, self.config, random.Random(1)) == []


class TestStrategies:

    def test_wildcard_takes_lowest_score(self):
        config = EngineConfig(**ONLY_WILDCARD)
        candidates = _candidates(30)
        final = inject_surprises(candidates, EmotionalProfile(), config, random.Random(3))
        assert final[3].strategy == "wildcard"
        assert final[3].item_id == candidates[-1].item_id
        assert final[7].item_id == candidates[-2].item_id

    def test_adjacent_steps_outside_dominant_cluster(self):
        horror = {"energy": 0.7, "darkness": 0.9}
        safe = [
            SearchHit(item_id=f"h{i}", score=0.9 - i * 0.01, genres=["Horror"], year=1994, traits=horror)
            for i in range(10)
        ]
        pool = [
            SearchHit(item_id="h-extra", score=0.7, genres=["Horror"], year=1996, traits=horror),
            SearchHit(item_id="comedy", score=0.69, genres=["Comedy"], year=1995,
                      traits={"darkness": 0.2, "humor": 0.9}),
            SearchHit(item_id="drama", score=0.68, genres=["Drama"], year=2012,
                      traits={"darkness": 0.7, "energy": 0.6}),
        ]
        config = EngineConfig(**ONLY_ADJACENT)
        final = inject_surprises(safe + pool, EmotionalProfile(), config, random.Random(0))
        assert final[3].item_id == "drama"
        assert final[3].strategy == "adjacent_discovery"
        assert final[7].item_id == "comedy"

    def test_falls_back_when_drawn_strategy_has_nothing(self):
        # No genres or years anywhere: adjacent discovery is never eligible
        candidates = [SearchHit(item_id=f"x{i}", score=1.0 - i * 0.01) for i in range(14)]
        config = EngineConfig(**ONLY_ADJACENT)
        final = inject_surprises(candidates, EmotionalProfile(), config, random.Random(0))
        surprises = [r for r in final if r.is_surprise]
        assert len(surprises) == 2
        assert all(r.strategy == "controlled_chaos" for r in surprises)
