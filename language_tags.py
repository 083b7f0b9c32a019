"""Language code checks used before sending codes to the translation endpoint."""

from __future__ import annotations

import re


# ISO 639-1 codes, including the deprecated aliases Google still accepts
# ("iw" for Hebrew, "in" for Indonesian, "ji" for Yiddish, "jw" for Javanese).
ISO_639_1_CODES = frozenset(
    """
    aa ab ae af ak am an ar as av ay az ba be bg bh bi bm bn bo br bs ca ce ch
    co cr cs cu cv cy da de dv dz ee el en eo es et eu fa ff fi fj fo fr fy ga
    gd gl gn gu gv ha he hi ho hr ht hu hy hz ia id ie ig ii ik in io is it iu
    iw ja ji jv jw ka kg ki kj kk kl km kn ko kr ks ku kv kw ky la lb lg li ln
    lo lt lu lv mg mh mi mk ml mn mr ms mt my na nb nd ne ng nl nn no nr nv ny
    oc oj om or os pa pi pl ps pt qu rm rn ro ru rw sa sc sd se sg sh si sk sl
    sm sn so sq sr ss st su sv sw ta te tg th ti tk tl tn to tr ts tt tw ty ug
    uk ur uz ve vi vo wa wo xh yi yo za zh zu
    """.split()
)

# Three-letter codes served by the endpoint that have no two-letter form.
EXTRA_LANGUAGE_CODES = frozenset(
    """
    ace bho ceb chr ckb doi fil gom haw hmn ilo kri lus mai mni nso sah yua
    """.split()
)

_TAG_PATTERN = re.compile(
    r"""
    ^(?P<language>[a-z]{2,3})
    (?:-[a-z]{4})?                 # script, e.g. Hans
    (?:-(?:[a-z]{2}|[0-9]{3}))?    # region, e.g. CN or 419
    (?:-(?:[a-z0-9]{5,8}|[0-9][a-z0-9]{3}))*$   # variants
    """,
    re.VERBOSE,
)


def normalize_language(code: str) -> str:
    """Lower-case ``code`` and use ``-`` as the subtag separator."""

    return code.strip().replace("_", "-").lower()


def is_valid_language(code: str) -> bool:
    """Return ``True`` when ``code`` is a well-formed tag for a known language."""

    if not isinstance(code, str) or not code.strip():
        return False
    match = _TAG_PATTERN.match(normalize_language(code))
    if match is None:
        return False
    language = match.group("language")
    return language in ISO_639_1_CODES or language in EXTRA_LANGUAGE_CODES


__all__ = ["EXTRA_LANGUAGE_CODES", "ISO_639_1_CODES", "is_valid_language", "normalize_language"]
