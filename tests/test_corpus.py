"""Tests for corpus storage and the offline summarize/embed jobs."""

import json

import pytest

from chat_matchmaker.corpus import CorpusStore, embed_corpus, summarize_corpus
from chat_matchmaker.errors import UpstreamServiceError
from chat_matchmaker.types import CorpusEntry, Summary


class TestCorpusStore:
    """Test loading and saving corpus files."""

    def test_load(self, tmp_path, corpus_records):
        path = tmp_path / "chats.json"
        path.write_text(json.dumps(corpus_records))
        entries = CorpusStore(str(path)).load()
        assert [e.id for e in entries] == ["A", "B", "C"]
        assert entries[0].summary.communication_style == "casual"
        assert entries[0].embedding == [1.0, 0.0, 0.0]

    def test_records_without_id_skipped(self, tmp_path, caplog):
        path = tmp_path / "chats.json"
        path.write_text(json.dumps([{"topic": "orphan"}, "junk", {"id": 7}]))
        entries = CorpusStore(str(path)).load()
        assert [e.id for e in entries] == ["7"]
        assert "no id" in caplog.text

    def test_malformed_fields_do_not_abort_load(self, tmp_path, corpus_records):
        records = corpus_records + [
            {"id": "X", "messages": 5, "embedding": [1, 0, 0]},
            {
                "id": "Y",
                "topic": ["not", "text"],
                "messages": ["junk", {"role": "user", "content": "hi"}],
            },
        ]
        path = tmp_path / "chats.json"
        path.write_text(json.dumps(records))
        entries = CorpusStore(str(path)).load()
        assert [e.id for e in entries] == ["A", "B", "C", "X", "Y"]
        assert entries[3].messages == []
        assert entries[4].topic == ""
        assert entries[4].messages == [{"role": "user", "content": "hi"}]

    def test_not_an_array(self, tmp_path):
        path = tmp_path / "chats.json"
        path.write_text('{"id": "A"}')
        with pytest.raises(ValueError):
            CorpusStore(str(path)).load()

    def test_missing_file(self, tmp_path):
        store = CorpusStore(str(tmp_path / "nope.json"))
        assert not store.exists()
        with pytest.raises(FileNotFoundError):
            store.load()

    def test_save_keeps_unknown_fields(self, tmp_path):
        path = tmp_path / "out" / "chats.json"
        record = {
            "id": "A",
            "topic": "chess",
            "messages": [{"role": "user", "content": "e4?"}],
            "createdAt": "2025-01-01T00:00:00Z",
            "source": "generator",
            "summary": {"topics": ["chess"], "raw_summary": "..."},
            "embedding": [0.5, 0.5],
            "embeddingText": "Topics: chess",
        }
        store = CorpusStore(str(path))
        store.save([CorpusEntry.from_dict(record)])

        saved = json.loads(path.read_text())[0]
        assert saved["source"] == "generator"
        assert saved["createdAt"] == "2025-01-01T00:00:00Z"
        assert saved["summary"]["raw_summary"] == "..."
        assert saved["summary"]["conversation_depth"] == "unknown"
        assert saved["embeddingText"] == "Topics: chess"


class TestSummarizeCorpus:
    """Test the batch summarization job."""

    @pytest.mark.asyncio
    async def test_summarizes_missing_only(self, fake_llm):
        done = Summary(topics=["kept"])
        entries = [
            CorpusEntry(id="A", topic="bread", messages=[{"role": "user", "content": "hi"}]),
            CorpusEntry(id="B", topic="chess", summary=done),
        ]
        report = await summarize_corpus(entries, fake_llm)
        assert report == {"total": 2, "processed": 1, "skipped": 1, "errors": 0}
        assert entries[0].summary.topics == ["baking", "sourdough"]
        assert entries[1].summary is done
        assert fake_llm.summarize_calls == [[{"role": "user", "content": "hi"}]]

    @pytest.mark.asyncio
    async def test_unparseable_uses_entry_topic(self, fake_llm):
        fake_llm.summary = "no json here"
        entries = [CorpusEntry(id="A", topic="cooking tips")]
        report = await summarize_corpus(entries, fake_llm)
        assert report["processed"] == 1
        assert entries[0].summary.topics == ["cooking tips"]
        assert entries[0].summary.one_sentence_summary == "Conversation about cooking tips"

    @pytest.mark.asyncio
    async def test_request_failure_stores_fallback(self, fake_llm):
        fake_llm.summarize_error = UpstreamServiceError("OpenAI API error: 500", "chat", 500)
        entries = [CorpusEntry(id="A", topic="knitting"), CorpusEntry(id="B", topic="golf")]
        report = await summarize_corpus(entries, fake_llm)
        assert report["errors"] == 2
        assert entries[1].summary.topics == ["golf"]
        assert "500" in entries[1].summary.parse_error


class TestEmbedCorpus:
    """Test the batch embedding job."""

    @pytest.mark.asyncio
    async def test_embeds_summarized_entries(self, fake_embedder):
        entries = [
            CorpusEntry(id="A", summary=Summary(topics=["chess"])),
            CorpusEntry(id="B"),
            CorpusEntry(id="C", summary=Summary(topics=["go"]), embedding=[0.3]),
        ]
        report = await embed_corpus(entries, fake_embedder)
        assert report == {"total": 3, "processed": 1, "skipped": 2, "errors": 0}
        assert entries[0].embedding == [1.0, 0.0, 0.0]
        assert entries[0].embedding_text == "Topics: chess"
        assert entries[1].embedding is None
        assert entries[2].embedding == [0.3]
        assert fake_embedder.texts == ["Topics: chess"]

    @pytest.mark.asyncio
    async def test_failure_counted_and_job_continues(self, fake_embedder):
        fake_embedder.error = UpstreamServiceError("Embedding API error: 503", "embeddings", 503)
        entries = [
            CorpusEntry(id="A", summary=Summary(topics=["chess"])),
            CorpusEntry(id="B", summary=Summary(topics=["go"])),
        ]
        report = await embed_corpus(entries, fake_embedder)
        assert report["errors"] == 2
        assert len(fake_embedder.texts) == 2
        assert all(e.embedding is None for e in entries)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
