"""Unit tests for the session manager pipelines."""

import re
from unittest.mock import MagicMock

import pytest

from sessionrag.exceptions import ExtractionError, InputError, ServiceError
from sessionrag.retrieval.indexer import SessionIndex
from sessionrag.session.manager import SessionManager, new_session_id
from sessionrag.session.prompts import NO_CONTEXT_ANSWER, build_prompt


@pytest.mark.unit
class TestNewSessionId:
    """Tests for session id generation."""

    def test_format(self):
        assert re.fullmatch(r"[0-9a-f]{32}", new_session_id())

    def test_unique(self):
        assert len({new_session_id() for _ in range(100)}) == 100


@pytest.mark.unit
class TestCreateSession:
    """Tests for SessionManager.create_session_from_folder."""

    def test_returns_id_of_saved_index(self, session_manager, tmp_store, docs_dir):
        session_id = session_manager.create_session_from_folder(docs_dir)

        assert re.fullmatch(r"[0-9a-f]{32}", session_id)
        assert tmp_store.list_sessions() == [session_id]

    def test_chunks_ids_texts_and_embeddings(self, session_manager, tmp_store, docs_dir, sample_documents):
        session_id = session_manager.create_session_from_folder(docs_dir)

        index = tmp_store.load(session_id)
        assert [c.id for c in index.chunks] == [
            "guides_charging.TXT#0",
            "guides_returns.md#0",
            "manual.txt#0",
        ]
        assert index.chunks[2].text == sample_documents["manual.txt"]
        assert [c.embedding for c in index.chunks] == [
            [0.0, 0.0, 2.0],
            [0.0, 2.0, 0.0],
            [2.0, 0.0, 0.0],
        ]

    def test_accepts_string_path(self, session_manager, docs_dir):
        assert session_manager.create_session_from_folder(str(docs_dir))

    def test_each_chunk_embedded_in_order(self, session_manager, keyword_embedder, docs_dir, sample_documents):
        session_manager.create_session_from_folder(docs_dir)

        assert keyword_embedder.calls == [
            sample_documents["guides/charging.TXT"],
            sample_documents["guides/returns.md"],
            sample_documents["manual.txt"],
        ]

    def test_long_document_chunk_lengths(self, tmp_path, tmp_store, keyword_embedder, mock_llm, plain_text_extractor):
        """A 2500-character document with 1024/100 chunking gives three chunks."""
        folder = tmp_path / "single"
        folder.mkdir()
        (folder / "long.txt").write_text("z" * 2500, encoding="utf-8")
        manager = SessionManager(
            store=tmp_store,
            embedder=keyword_embedder,
            llm=mock_llm,
            extractor=plain_text_extractor,
            extensions=[".txt"],
        )

        index = tmp_store.load(manager.create_session_from_folder(folder))

        assert [c.id for c in index.chunks] == ["long.txt#0", "long.txt#1", "long.txt#2"]
        assert [len(c.text) for c in index.chunks] == [1024, 1024, 652]

    def test_chunk_ids_unique_when_flattened_paths_collide(self, session_manager, tmp_store, tmp_path):
        """a/b.txt and a_b.txt in one folder get different chunk ids."""
        folder = tmp_path / "colliding"
        (folder / "a").mkdir(parents=True)
        (folder / "a" / "b.txt").write_text("nested warranty", encoding="utf-8")
        (folder / "a_b.txt").write_text("flat warranty", encoding="utf-8")

        index = tmp_store.load(session_manager.create_session_from_folder(folder))

        ids = [c.id for c in index.chunks]
        assert len(ids) == 2
        assert len(set(ids)) == len(ids)

    def test_ids_stable_across_runs(self, session_manager, tmp_store, docs_dir):
        first = tmp_store.load(session_manager.create_session_from_folder(docs_dir))
        second = tmp_store.load(session_manager.create_session_from_folder(docs_dir))

        assert first.session_id != second.session_id
        assert first.chunks == second.chunks

    def test_missing_folder(self, session_manager, tmp_path):
        with pytest.raises(InputError, match="does not exist"):
            session_manager.create_session_from_folder(tmp_path / "nope")

    def test_folder_is_a_file(self, session_manager, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("not a folder", encoding="utf-8")

        with pytest.raises(InputError):
            session_manager.create_session_from_folder(path)

    def test_no_documents(self, session_manager, tmp_path, tmp_store):
        (tmp_path / "empty").mkdir()
        (tmp_path / "empty" / "image.png").write_bytes(b"\x89PNG")

        with pytest.raises(InputError, match="No documents"):
            session_manager.create_session_from_folder(tmp_path / "empty")

        assert tmp_store.list_sessions() == []

    def test_extraction_failure_aborts(self, tmp_store, keyword_embedder, mock_llm, docs_dir):
        def failing_extractor(path):
            if path.name == "returns.md":
                raise ExtractionError("cannot read", path=path)
            return path.read_text(encoding="utf-8")

        manager = SessionManager(tmp_store, keyword_embedder, mock_llm, failing_extractor, extensions=[".txt", ".md"])

        with pytest.raises(ExtractionError):
            manager.create_session_from_folder(docs_dir)

        assert tmp_store.list_sessions() == []

    def test_embedding_failure_aborts(self, tmp_store, mock_llm, plain_text_extractor, docs_dir):
        embedder = MagicMock()
        embedder.embed.side_effect = [[1.0, 0.0], ServiceError("connection refused")]
        manager = SessionManager(tmp_store, embedder, mock_llm, plain_text_extractor, extensions=[".txt", ".md"])

        with pytest.raises(ServiceError, match="connection refused"):
            manager.create_session_from_folder(docs_dir)

        assert tmp_store.list_sessions() == []

    def test_empty_embedding_rejected(self, tmp_store, mock_llm, plain_text_extractor, docs_dir):
        embedder = MagicMock()
        embedder.embed.return_value = []
        manager = SessionManager(tmp_store, embedder, mock_llm, plain_text_extractor, extensions=[".txt"])

        with pytest.raises(ServiceError, match="Empty embedding"):
            manager.create_session_from_folder(docs_dir)

        assert tmp_store.list_sessions() == []

    def test_inconsistent_dimension_rejected(self, tmp_store, mock_llm, plain_text_extractor, docs_dir):
        embedder = MagicMock()
        embedder.embed.side_effect = [[1.0, 0.0], [1.0, 0.0, 0.0]]
        manager = SessionManager(tmp_store, embedder, mock_llm, plain_text_extractor, extensions=[".txt"])

        with pytest.raises(ServiceError, match="dimension 3, expected 2"):
            manager.create_session_from_folder(docs_dir)

        assert tmp_store.list_sessions() == []

    def test_save_failure_propagates(self, keyword_embedder, mock_llm, plain_text_extractor, docs_dir):
        store = MagicMock()
        store.save.side_effect = OSError("read-only file system")
        manager = SessionManager(store, keyword_embedder, mock_llm, plain_text_extractor, extensions=[".txt"])

        with pytest.raises(OSError):
            manager.create_session_from_folder(docs_dir)

    def test_create_session_alias(self, session_manager, docs_dir):
        assert SessionManager.create_session is SessionManager.create_session_from_folder
        assert session_manager.create_session(docs_dir)


@pytest.mark.unit
class TestChat:
    """Tests for SessionManager.chat."""

    @pytest.fixture
    def session_id(self, session_manager, docs_dir):
        return session_manager.create_session_from_folder(docs_dir)

    def test_answers_from_relevant_context(self, session_manager, session_id, mock_llm, sample_documents):
        answer = session_manager.chat(session_id, "How long is the warranty?")

        assert answer == "The warranty lasts two years."
        mock_llm.invoke.assert_called_once_with(
            build_prompt(sample_documents["manual.txt"], "How long is the warranty?")
        )

    def test_answer_returned_verbatim(self, session_manager, session_id, mock_llm):
        mock_llm.invoke.return_value = "  raw <think>output</think>\n"

        assert session_manager.chat(session_id, "warranty?") == "  raw <think>output</think>\n"

    def test_context_joined_in_retrieval_order(self, session_manager, session_id, mock_llm, sample_documents):
        """Tied chunks keep index order and are separated by a blank line."""
        session_manager.chat(session_id, "warranty or return?")

        prompt = mock_llm.invoke.call_args[0][0]
        expected_context = sample_documents["guides/returns.md"] + "\n\n" + sample_documents["manual.txt"]
        assert prompt == build_prompt(expected_context, "warranty or return?")

    def test_k_limits_context(self, session_manager, session_id, mock_llm, sample_documents):
        session_manager.chat(session_id, "warranty or return?", k=1)

        prompt = mock_llm.invoke.call_args[0][0]
        assert sample_documents["guides/returns.md"] in prompt
        assert sample_documents["manual.txt"] not in prompt

    def test_no_relevant_context_skips_llm(self, session_manager, session_id, mock_llm):
        """Nothing above the threshold returns the sentinel and never calls the LLM."""
        answer = session_manager.chat(session_id, "What's the weather like?")

        assert answer == NO_CONTEXT_ANSWER
        mock_llm.invoke.assert_not_called()

    def test_threshold_above_every_score(self, session_manager, session_id, mock_llm):
        answer = session_manager.chat(session_id, "warranty", score_threshold=1.5)

        assert answer == NO_CONTEXT_ANSWER
        mock_llm.invoke.assert_not_called()

    def test_unknown_session(self, session_manager, keyword_embedder, mock_llm):
        with pytest.raises(InputError, match="unknown session"):
            session_manager.chat("0" * 32, "warranty?")

        assert keyword_embedder.calls == []
        mock_llm.invoke.assert_not_called()

    def test_query_embedding_failure(self, tmp_store, mock_llm, sample_index):
        tmp_store.save(sample_index)
        embedder = MagicMock()
        embedder.embed.side_effect = ServiceError("timeout")
        manager = SessionManager(tmp_store, embedder, mock_llm, extractor=MagicMock())

        with pytest.raises(ServiceError):
            manager.chat(sample_index.session_id, "question")

        assert tmp_store.load(sample_index.session_id) == sample_index
        mock_llm.invoke.assert_not_called()

    def test_llm_failure_propagates(self, session_manager, session_id, mock_llm):
        mock_llm.invoke.side_effect = ServiceError("Chat response missing 'message.content'")

        with pytest.raises(ServiceError):
            session_manager.chat(session_id, "warranty?")

    def test_index_loaded_on_every_call(self, keyword_embedder, mock_llm, sample_index):
        store = MagicMock()
        store.load.return_value = sample_index
        manager = SessionManager(store, keyword_embedder, mock_llm, extractor=MagicMock())

        manager.chat(sample_index.session_id, "warranty")
        manager.chat(sample_index.session_id, "warranty")

        assert store.load.call_count == 2

    def test_session_with_no_chunks(self, tmp_store, keyword_embedder, mock_llm):
        tmp_store.save(SessionIndex(session_id="empty"))
        manager = SessionManager(tmp_store, keyword_embedder, mock_llm, extractor=MagicMock())

        assert manager.chat("empty", "warranty") == NO_CONTEXT_ANSWER
        mock_llm.invoke.assert_not_called()
