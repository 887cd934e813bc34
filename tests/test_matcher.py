"""Tests for vector math and MatchEngine."""

import logging
import math

import pytest

from chat_matchmaker.config import MatchingConfig
from chat_matchmaker.matcher import MatchEngine
from chat_matchmaker.types import CorpusEntry, Summary
from chat_matchmaker.vector import cosine_similarity, is_valid_embedding


def make_engine(records, threshold=0.7, max_matches=5):
    engine = MatchEngine(MatchingConfig(similarity_threshold=threshold, max_matches=max_matches))
    engine.load(records)
    return engine


class TestVector:
    """Test cosine similarity and embedding validation."""

    @pytest.mark.parametrize("v", [[1.0, 0.0], [0.3, -2.5, 7.0], [1e-3] * 64, [5]])
    def test_self_similarity_is_one(self, v):
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1, 2], [-1, -2]) == pytest.approx(-1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)

    def test_zero_magnitude_raises(self):
        with pytest.raises(ValueError):
            cosine_similarity([0, 0, 0], [1, 2, 3])

    def test_dimension_mismatch_raises(self):
        with pytest.raises(ValueError):
            cosine_similarity([1, 0], [1, 0, 0])

    def test_valid_embeddings(self):
        assert is_valid_embedding([0.1, 2, -3.5])
        assert is_valid_embedding((1.0,))

    @pytest.mark.parametrize("value", [
        None, [], "0.1,0.2", {"a": 1}, [0.1, "x"], [True, False],
        [float("nan"), 1.0], [float("inf")], 3.0,
    ])
    def test_invalid_embeddings(self, value):
        assert not is_valid_embedding(value)


class TestLoad:
    """Test corpus loading."""

    def test_filters_bad_embeddings(self, caplog):
        records = [
            {"id": "ok", "embedding": [1.0, 0.0]},
            {"id": "missing"},
            {"id": "empty", "embedding": []},
            {"id": "text", "embedding": "1,0"},
            {"id": "mixed", "embedding": [1.0, None]},
        ]
        with caplog.at_level(logging.WARNING):
            count = MatchEngine().load(records)
        assert count == 1
        assert "missing" in caplog.text

    def test_duplicate_ids_keep_first(self):
        engine = make_engine([
            {"id": "A", "topic": "first", "embedding": [1.0, 0.0]},
            {"id": "A", "topic": "second", "embedding": [0.0, 1.0]},
        ])
        assert len(engine.entries) == 1
        assert engine.get_chat_by_id("A").topic == "first"

    def test_accepts_corpus_entries(self):
        engine = MatchEngine()
        engine.load([CorpusEntry(id="x", embedding=[1.0])])
        assert engine.get_chat_by_id("x") is not None

    def test_reload_replaces_snapshot(self, corpus_records):
        engine = make_engine(corpus_records)
        engine.load(corpus_records[:1])
        assert [e.id for e in engine.entries] == ["A"]
        assert engine.get_chat_by_id("B") is None


class TestFindMatches:
    """Test ranking."""

    def test_exact_match_only(self):
        engine = make_engine([
            {"id": "A", "embedding": [1, 0, 0]},
            {"id": "B", "embedding": [0, 1, 0]},
        ], threshold=0.7)
        matches = engine.find_matches([1, 0, 0])
        assert [m.chat_id for m in matches] == ["A"]
        assert matches[0].similarity == pytest.approx(1.0)

    def test_equal_scores_keep_ingestion_order(self):
        engine = make_engine([
            {"id": "A", "embedding": [1, 0, 0]},
            {"id": "B", "embedding": [0, 1, 0]},
        ], threshold=0.5)
        matches = engine.find_matches([0.6, 0.6, 0])
        assert [m.chat_id for m in matches] == ["A", "B"]
        assert matches[0].similarity == pytest.approx(math.sqrt(0.5))
        assert matches[0].similarity == matches[1].similarity

    def test_equal_scores_reverse_ingestion(self):
        engine = make_engine([
            {"id": "B", "embedding": [0, 1, 0]},
            {"id": "A", "embedding": [1, 0, 0]},
        ], threshold=0.5)
        assert [m.chat_id for m in engine.find_matches([0.6, 0.6, 0])] == ["B", "A"]

    def test_threshold_above_score_returns_nothing(self):
        engine = make_engine([
            {"id": "A", "embedding": [1, 0, 0]},
            {"id": "B", "embedding": [0, 1, 0]},
        ], threshold=0.71)
        assert engine.find_matches([0.6, 0.6, 0]) == []

    def test_sorted_descending(self, corpus_records):
        engine = make_engine(corpus_records, threshold=0.0)
        matches = engine.find_matches([1.0, 0.05, 0.0])
        scores = [m.similarity for m in matches]
        assert scores == sorted(scores, reverse=True)
        assert matches[0].chat_id == "A"

    def test_respects_threshold_and_max(self):
        records = [{"id": str(i), "embedding": [1.0, i / 10]} for i in range(10)]
        engine = make_engine(records, threshold=0.9, max_matches=3)
        matches = engine.find_matches([1.0, 0.0])
        assert len(matches) == 3
        assert all(m.similarity >= 0.9 for m in matches)
        assert [m.chat_id for m in matches] == ["0", "1", "2"]

    def test_exclude_id(self, corpus_records):
        engine = make_engine(corpus_records, threshold=0.0)
        matches = engine.find_matches([1.0, 0.0, 0.0], exclude_id="A")
        assert "A" not in [m.chat_id for m in matches]
        assert matches[0].chat_id == "C"

    def test_candidate_fields(self, corpus_records):
        engine = make_engine(corpus_records)
        match = engine.find_matches([1.0, 0.0, 0.0])[0]
        assert match.topic == "sourdough"
        assert match.summary.topics == ["baking", "bread"]
        assert match.match_reason.startswith("100% match - ")

    @pytest.mark.parametrize("query", [None, [], "abc", [float("nan"), 0, 0], {"x": 1}])
    def test_bad_query_returns_empty(self, corpus_records, query, caplog):
        engine = make_engine(corpus_records)
        with caplog.at_level(logging.WARNING):
            assert engine.find_matches(query) == []
        assert "Invalid embedding" in caplog.text

    def test_skips_mismatched_and_zero_vectors(self, caplog):
        engine = make_engine([
            {"id": "short", "embedding": [1.0, 0.0]},
            {"id": "zero", "embedding": [0.0, 0.0, 0.0]},
            {"id": "good", "embedding": [1.0, 0.0, 0.0]},
        ])
        with caplog.at_level(logging.WARNING):
            matches = engine.find_matches([1.0, 0.0, 0.0])
        assert [m.chat_id for m in matches] == ["good"]
        assert "short" in caplog.text
        assert "zero" in caplog.text

    def test_empty_corpus(self):
        assert MatchEngine().find_matches([1.0, 0.0]) == []


class TestMatchReason:
    """Test match explanations."""

    def setup_method(self):
        self.engine = MatchEngine()

    def test_topics_and_style(self):
        summary = Summary(
            topics=["baking", "bread", "pizza"],
            communication_style="casual",
            personality_traits=["curious"],
        )
        assert self.engine.generate_match_reason(summary, 0.876) == (
            "88% match - shared interest in baking and bread "
            "and similar casual communication style"
        )

    def test_traits_fill_second_slot(self):
        summary = Summary(topics=["chess"], personality_traits=["analytical", "calm", "witty"])
        assert self.engine.generate_match_reason(summary, 0.9) == (
            "90% match - shared interest in chess and both analytical and calm"
        )

    def test_traits_only(self):
        summary = Summary(personality_traits=["curious"])
        assert self.engine.generate_match_reason(summary, 0.75) == "75% match - both curious"

    @pytest.mark.parametrize("summary", [None, Summary(), Summary(topics=[], communication_style=None)])
    def test_generic_fallback(self, summary):
        reason = self.engine.generate_match_reason(summary, 0.72)
        assert reason == "72% match - similar conversation patterns"

    def test_rounds_half_up(self):
        assert self.engine.generate_match_reason(None, 0.125).startswith("13% match")


class TestTestMatch:
    """Test pairwise comparison."""

    def test_match(self, corpus_records):
        engine = make_engine(corpus_records)
        result = engine.test_match("A", "C")
        assert result.similarity == pytest.approx(cosine_similarity([1, 0, 0], [0.9, 0.1, 0]))
        assert result.is_match is True
        assert "enthusiastic" in result.reason

    def test_no_match(self, corpus_records):
        result = make_engine(corpus_records).test_match("A", "B")
        assert result.similarity == pytest.approx(0.0)
        assert result.is_match is False

    def test_unknown_id(self, corpus_records):
        engine = make_engine(corpus_records)
        assert engine.test_match("A", "nope") is None
        assert engine.test_match("nope", "A") is None

    def test_entry_without_embedding_is_not_found(self):
        engine = make_engine([{"id": "A", "embedding": [1.0]}, {"id": "B"}])
        assert engine.test_match("A", "B") is None


class TestStatsAndThreshold:
    """Test stats() and set_threshold()."""

    def test_stats(self, corpus_records):
        stats = make_engine(corpus_records + [{"id": "D", "embedding": [0, 0, 1]}]).stats()
        assert stats["total_chats"] == 4
        assert stats["unique_topics"] == 3
        assert stats["topics"] == ["baking", "bread", "chess"]
        assert stats["unique_styles"] == 2

    def test_stats_empty(self):
        assert MatchEngine().stats()["total_chats"] == 0

    def test_set_threshold(self, corpus_records):
        engine = make_engine(corpus_records)
        engine.set_threshold(0.0)
        assert engine.threshold == 0.0
        assert len(engine.find_matches([1.0, 0.0, 0.0])) == 3

    @pytest.mark.parametrize("value", [-0.1, 1.5, float("nan"), True, "0.5"])
    def test_set_threshold_rejects(self, value):
        engine = MatchEngine()
        with pytest.raises(ValueError):
            engine.set_threshold(value)
        assert engine.threshold == 0.7


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
