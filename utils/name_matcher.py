from typing import Iterable, Optional
from core.config import NAME_MATCH_THRESHOLD

def normalize_name(name: Optional[str]) -> str:
    if not name:
        return ""
    return " ".join(name.lower().strip().split())

def word_overlap_score(name1: str, name2: str) -> float:
    """Words of name1 found in name2 (repeats counted) over all distinct words."""
    words1 = normalize_name(name1).split()
    words2 = normalize_name(name2).split()
    if not words1 or not words2:
        return 0.0
    present = set(words2)
    shared = sum(1 for word in words1 if word in present)
    return shared / len(set(words1) | present)

def is_beneficiary_name_allowed(holder_name: str, allowed_names: Iterable[Optional[str]]) -> bool:
    # Bank records often append suffixes ("Traders", "Pvt Ltd"), so containment
    # either way counts as a match.
    claimed = normalize_name(holder_name)
    if len(claimed) < 2:
        return False

    for candidate in allowed_names:
        allowed = normalize_name(candidate)
        if not allowed:
            continue
        if claimed == allowed or claimed in allowed or allowed in claimed:
            return True
        if word_overlap_score(claimed, allowed) >= NAME_MATCH_THRESHOLD:
            return True
    return False
