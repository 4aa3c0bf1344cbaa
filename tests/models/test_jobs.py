"""
Test suite for ingestion job schemas.

System role: Verification of the queue message contract
"""

import pydantic
import pytest

from linkmeld.models.jobs import (
    EmbeddingTaskKind,
    EmbedJob,
    PdfFetchJob,
    SummarizeJob,
    parse_job,
)


class TestParseJob:
    """Test suite for parse_job."""

    @pytest.mark.parametrize(
        "payload, expected_type",
        [
            ({"kind": "summarize", "document_id": "d", "user_id": "u"}, SummarizeJob),
            ({"kind": "embed", "document_id": "d", "user_id": "u"}, EmbedJob),
            (
                {"kind": "pdf_fetch", "document_id": "d", "user_id": "u", "url": "https://x/a.pdf"},
                PdfFetchJob,
            ),
        ],
    )
    def test_kind_should_select_job_class(self, payload, expected_type) -> None:
        assert isinstance(parse_job(payload), expected_type)

    def test_embed_job_should_default_to_index(self) -> None:
        job = parse_job({"kind": "embed", "document_id": "d", "user_id": "u"})

        assert job.task_type == EmbeddingTaskKind.INDEX
        assert job.attempt == 1

    def test_unknown_kind_should_raise(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            parse_job({"kind": "transcode", "document_id": "d", "user_id": "u"})

    def test_pdf_job_without_url_should_raise(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            parse_job({"kind": "pdf_fetch", "document_id": "d", "user_id": "u"})

    def test_attempt_must_be_positive(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            SummarizeJob(document_id="d", user_id="u", attempt=0)


class TestJobRepr:
    def test_api_key_should_not_appear_in_repr(self) -> None:
        """Test the user's API key never leaks into log output of a job."""
        job = SummarizeJob(document_id="d", user_id="u", api_key="secret-key")

        assert "secret-key" not in repr(job)
        assert job.api_key == "secret-key"
