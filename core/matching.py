"""Tolerant answer matching for free-text questions.

All matchers are pure and never raise on empty or odd input; they simply
return False.
"""

from .config import TOKEN_OVERLAP_THRESHOLD
from .utils import normalize_german, normalize_text, tokens

UMLAUT_DIGRAPHS = [('oe', 'o'), ('ae', 'a'), ('ue', 'u')]


def _fold_digraphs(text: str) -> str:
    for digraph, vowel in UMLAUT_DIGRAPHS:
        text = text.replace(digraph, vowel)
    return text


def _overlap_ratio(user: str, reference: str) -> float:
    """Share of the reference's tokens that also appear in the user's answer."""
    ref_tokens = tokens(reference)
    if not ref_tokens:
        return 0.0
    user_tokens = set(tokens(user))
    common = sum(1 for t in ref_tokens if t in user_tokens)
    return common / len(ref_tokens)


def _loose_match(user: str, reference: str) -> bool:
    if not user or not reference:
        return False
    if user == reference:
        return True
    if user in reference or reference in user:
        return True
    return _overlap_ratio(user, reference) >= TOKEN_OVERLAP_THRESHOLD


def is_exact_match(user_raw: str, correct: str) -> bool:
    """Spelling recall: plural forms, conjugations, prefixes, participles.

    Accepts the normalized forms being equal, equal once every 'e' is
    removed, or equal once umlaut digraphs (oe/ae/ue) are folded on
    either side.
    """
    user = normalize_german(user_raw)
    expected = normalize_german(correct)
    if not user or not expected:
        return False
    if user == expected:
        return True
    if user.replace('e', '') == expected.replace('e', ''):
        return True
    return _fold_digraphs(user) == expected or _fold_digraphs(expected) == user


def is_meaning_match(user_raw: str, accepted: list[str]) -> bool:
    """Free-text recall of an English meaning against accepted glosses."""
    if not user_raw or not accepted:
        return False
    user = normalize_text(user_raw)
    return any(_loose_match(user, normalize_text(gloss)) for gloss in accepted)


def is_translation_match(user_raw: str, correct: str) -> bool:
    """Like is_meaning_match for a single gloss, but diacritic-tolerant."""
    return _loose_match(normalize_german(user_raw), normalize_german(correct))


def is_perfect_match(user_raw: str, person: str, aux: str, partizip: str) -> bool:
    """Perfect tense: the full phrase, or any answer using both aux and participle."""
    user = normalize_german(user_raw)
    if not user:
        return False
    if user == normalize_german(f"{person} {aux} {partizip}"):
        return True
    user_tokens = set(tokens(user))
    return normalize_german(aux) in user_tokens and normalize_german(partizip) in user_tokens
