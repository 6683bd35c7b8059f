"""Advisory audit of drafted metadata.

The drafting stage is a best-effort generator: it is asked for 3 titles of
55-70 characters, 3 descriptions of ~150-200 words, ~20 tags and 3-5
hashtags, and nothing downstream may assume it complied. This module reports
how far a ContentResult is from those targets without rejecting it.

Warnings are target misses. Errors are YouTube hard limits (title 100
chars, description 5000 chars, tags 500 chars total) that would make an
upload fail as-is.

Title scoring (0-100):
- Keyword: primary keyword present, with a bonus for appearing early.
- Length: full marks inside the 55-70 band, linear penalty outside.
- Uniqueness: penalizes token overlap with the other titles.
"""

from __future__ import annotations

from typing import Optional

from schemas.audit import AuditIssue, ContentAudit
from schemas.content import ContentResult

TITLE_TARGET_COUNT = 3
TITLE_LENGTH_BAND = (55, 70)
DESCRIPTION_TARGET_COUNT = 3
DESCRIPTION_WORD_BAND = (150, 200)
DESCRIPTION_WORD_SLACK = 30
TAG_TARGET_BAND = (15, 25)
HASHTAG_BAND = (3, 5)

YOUTUBE_TITLE_MAX = 100
YOUTUBE_DESCRIPTION_MAX = 5000
YOUTUBE_TAGS_TOTAL_MAX = 500


def normalize_text(text: str) -> str:
    """Lowercase and collapse whitespace."""
    return " ".join((text or "").strip().lower().split())


def tokenize(text: str) -> list[str]:
    """Split into alphanumeric tokens (unicode-aware, so non-Latin scripts work)."""
    tokens: list[str] = []
    current: list[str] = []

    for ch in normalize_text(text):
        if ch.isalnum():
            current.append(ch)
        else:
            if current:
                tokens.append("".join(current))
                current = []

    if current:
        tokens.append("".join(current))

    return tokens


def token_overlap_similarity(a: str, b: str) -> float:
    """Jaccard similarity on token sets. 0.0 for empty unions."""
    a_tokens = set(tokenize(a))
    b_tokens = set(tokenize(b))
    union = a_tokens | b_tokens
    if not union:
        return 0.0
    return len(a_tokens & b_tokens) / len(union)


def keyword_position(text: str, keyword: str) -> Optional[int]:
    """Character offset of keyword in text (case-insensitive), or None."""
    kw = normalize_text(keyword)
    if not kw:
        return None
    idx = normalize_text(text).find(kw)
    return idx if idx >= 0 else None


def word_count(text: str) -> int:
    return len((text or "").split())


def score_title(title: str, *, primary_keyword: str, others: list[str]) -> float:
    keyword_component = 0.0
    pos = keyword_position(title, primary_keyword)
    if pos is not None:
        keyword_component = 30.0
        # "near the start": first third of the title earns the full bonus
        if pos <= max(1, len(title) // 3):
            keyword_component += 15.0
    else:
        pk_tokens = set(tokenize(primary_keyword))
        if pk_tokens:
            overlap = len(pk_tokens & set(tokenize(title))) / len(pk_tokens)
            keyword_component = 25.0 * overlap

    lo, hi = TITLE_LENGTH_BAND
    n = len(title)
    length_component = 25.0
    if n < lo:
        length_component = max(0.0, 25.0 - (lo - n) * 1.0)
    elif n > hi:
        length_component = max(0.0, 25.0 - (n - hi) * 1.0)

    max_sim = max((token_overlap_similarity(title, o) for o in others), default=0.0)
    uniqueness_component = 30.0 * (1.0 - max_sim)

    total = keyword_component + length_component + uniqueness_component
    return round(max(0.0, min(100.0, total)), 2)


def _count_issue(field: str, count: int, lo: int, hi: int, what: str) -> Optional[AuditIssue]:
    if lo <= count <= hi:
        return None
    expected = str(lo) if lo == hi else f"{lo}-{hi}"
    return AuditIssue(severity="warning", field_path=field, message=f"Expected {expected} {what}, got {count}")


def audit_content(result: ContentResult, *, primary_keyword: Optional[str] = None) -> ContentAudit:
    """Check a ContentResult against the drafting targets.

    primary_keyword defaults to result.strategy.primary_keyword; without
    either, keyword checks are skipped.
    """
    pk = primary_keyword or (result.strategy.primary_keyword if result.strategy else "")
    issues: list[AuditIssue] = []

    issue = _count_issue("titles", len(result.titles), TITLE_TARGET_COUNT, TITLE_TARGET_COUNT, "titles")
    if issue:
        issues.append(issue)

    lo, hi = TITLE_LENGTH_BAND
    scores: list[float] = []
    for i, title in enumerate(result.titles):
        path = f"titles[{i}]"
        n = len(title)
        if n > YOUTUBE_TITLE_MAX:
            issues.append(AuditIssue(severity="error", field_path=path, message=f"Title is {n} chars; YouTube allows {YOUTUBE_TITLE_MAX}"))
        elif not lo <= n <= hi:
            issues.append(AuditIssue(severity="warning", field_path=path, message=f"Title is {n} chars; target is {lo}-{hi}"))

        if pk:
            pos = keyword_position(title, pk)
            if pos is None:
                issues.append(AuditIssue(severity="warning", field_path=path, message="Primary keyword missing"))
            elif pos > len(title) // 2:
                issues.append(AuditIssue(severity="warning", field_path=path, message="Primary keyword is not near the start"))

        others = [t for j, t in enumerate(result.titles) if j != i]
        scores.append(score_title(title, primary_keyword=pk, others=others))

    issue = _count_issue(
        "descriptions", len(result.descriptions), DESCRIPTION_TARGET_COUNT, DESCRIPTION_TARGET_COUNT, "descriptions"
    )
    if issue:
        issues.append(issue)

    wlo, whi = DESCRIPTION_WORD_BAND
    for i, desc in enumerate(result.descriptions):
        path = f"descriptions[{i}]"
        if len(desc) > YOUTUBE_DESCRIPTION_MAX:
            issues.append(AuditIssue(severity="error", field_path=path, message=f"Description exceeds {YOUTUBE_DESCRIPTION_MAX} chars"))

        wc = word_count(desc)
        if not (wlo - DESCRIPTION_WORD_SLACK) <= wc <= (whi + DESCRIPTION_WORD_SLACK):
            issues.append(AuditIssue(severity="warning", field_path=path, message=f"Description has {wc} words; target is ~{wlo}-{whi}"))

        if pk:
            opening = "\n".join(desc.strip().splitlines()[:2])
            if keyword_position(opening, pk) is None:
                issues.append(AuditIssue(severity="warning", field_path=path, message="Primary keyword missing from the first two lines"))

    issue = _count_issue("tags", len(result.tags), *TAG_TARGET_BAND, "tags")
    if issue:
        issues.append(issue)

    # YouTube counts tags joined by commas; multi-word tags carry quotes.
    tags_len = sum(len(t) + (2 if " " in t else 0) for t in result.tags) + max(0, len(result.tags) - 1)
    if tags_len > YOUTUBE_TAGS_TOTAL_MAX:
        issues.append(AuditIssue(severity="error", field_path="tags", message=f"Tags total {tags_len} chars; YouTube allows {YOUTUBE_TAGS_TOTAL_MAX}"))

    issue = _count_issue("hashtags", len(result.hashtags), *HASHTAG_BAND, "hashtags")
    if issue:
        issues.append(issue)
    for i, tag in enumerate(result.hashtags):
        if not tag.startswith("#"):
            issues.append(AuditIssue(severity="warning", field_path=f"hashtags[{i}]", message="Hashtag does not start with '#'"))

    if "16:9" not in result.thumbnail_prompt:
        issues.append(AuditIssue(severity="warning", field_path="thumbnail_prompt", message="Thumbnail prompt does not state the 16:9 aspect ratio"))

    return ContentAudit(issues=issues, title_scores=scores)
