"""Tests for participant id helpers"""

from uuid import uuid4

from app.utils.participant_utils import clean_participant_ids


class TestCleanParticipantIds:
    """Test participant id normalization"""

    def test_drops_empty_and_duplicate_ids(self):
        assert clean_participant_ids(["a", "", None, "b", "a"]) == ["a", "b"]

    def test_converts_uuids_to_strings(self):
        user_id = uuid4()
        assert clean_participant_ids([user_id]) == [str(user_id)]

    def test_uuid_and_its_string_are_the_same_participant(self):
        user_id = uuid4()
        assert clean_participant_ids([user_id, str(user_id)]) == [str(user_id)]

    def test_none_is_empty(self):
        assert clean_participant_ids(None) == []
