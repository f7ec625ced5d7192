"""Unit tests for kind-specific payload validation."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.schemas.entry import EntryCreate, validate_payload


class TestResearchPayload:

    def test_valid(self, research_payload):
        cleaned = validate_payload("research", research_payload)
        assert cleaned["publication_type"] == "working_paper"
        assert cleaned["doi"] is None

    @pytest.mark.parametrize(
        "field, value",
        [
            ("title", "AI"),
            ("year", "26"),
            ("abstract", "Too short"),
            ("publication_type", "tweet"),
        ],
    )
    def test_invalid_fields(self, research_payload, field, value):
        with pytest.raises(ValueError) as exc_info:
            validate_payload("research", {**research_payload, field: value})
        assert field in str(exc_info.value)


class TestPartnershipPayload:

    def test_contact_email_must_be_valid(self, partnership_payload):
        with pytest.raises(ValueError, match="contact_email"):
            validate_payload("partnership", {**partnership_payload, "contact_email": "not-an-email"})

    def test_optional_end_date(self, partnership_payload):
        assert validate_payload("partnership", partnership_payload)["end_date"] is None


class TestRankingPayload:

    def test_missing_rank(self, ranking_payload):
        payload = dict(ranking_payload)
        del payload["rank"]
        with pytest.raises(ValueError, match="rank"):
            validate_payload("ranking", payload)


class TestEntryCreate:

    def test_payload_checked_against_kind(self, ranking_payload):
        with pytest.raises(PydanticValidationError):
            EntryCreate(kind="research", payload=ranking_payload)

    def test_payload_cleaned(self, ranking_payload):
        data = EntryCreate(kind="ranking", payload={**ranking_payload, "extra": "ignored"})
        assert "extra" not in data.payload
        assert data.payload["notes"] is None
