"""Participant id helpers"""

from typing import Any, Iterable, List, Optional


def clean_participant_ids(participant_ids: Optional[Iterable[Any]]) -> List[str]:
    """
    Drop empty ids and duplicates, keeping first-seen order.

    Args:
        participant_ids: Raw participant ids

    Returns:
        List of unique, non-empty ids as strings
    """
    cleaned: List[str] = []
    seen = set()
    for participant_id in participant_ids or []:
        if not participant_id:
            continue
        participant_id = str(participant_id)
        if participant_id in seen:
            continue
        seen.add(participant_id)
        cleaned.append(participant_id)
    return cleaned
