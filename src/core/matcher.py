"""Notification-to-conversation matching (core domain).

Each scraped sidebar row is scored against the intercepted notification and
the best row is only accepted when it clears the confidence floor and is
clearly ahead of the runner-up. Uncertain matches are withheld: a missing
native notification is preferable to one routed into the wrong (possibly
muted) conversation.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterable, List, Optional

from core.config import (
    CROSS_REFERENCE_SLACK,
    READ_PENALTY,
    WEIGHT_BODY_MENTIONS_TITLE,
    WEIGHT_BODY_OVERLAP,
    WEIGHT_BODY_TITLE_OVERLAP,
    WEIGHT_EXACT_TITLE,
    WEIGHT_PREVIEW_MENTIONS_SENDER,
    WEIGHT_TITLE_CONTAINS,
    WEIGHT_TITLE_OVERLAP,
    MatcherConfig,
)
from core.models import (
    REASON_AMBIGUOUS,
    REASON_LOW_CONFIDENCE,
    REASON_MATCHED,
    REASON_MUTED_CONFLICT,
    REASON_NO_CANDIDATES,
    NotificationCandidate,
    NotificationMatchResult,
    NotificationPayload,
)
from core.text import clamp_score, normalize_text, token_overlap_ratio, tokenize

TERSE_SENDER_BODY_PATTERNS = [
    re.compile(r"^(?:[a-z0-9.'_-]+\s+)?sent (?:you )?a message$", re.IGNORECASE),
    re.compile(r"^(?:[a-z0-9.'_-]+\s+)?new message$", re.IGNORECASE),
    re.compile(
        r"^(?:[a-z0-9.'_-]+\s+)?sent (?:an? )?(?:photo|video|attachment|gif|sticker)$",
        re.IGNORECASE,
    ),
]

# A preview has to be at least this long before we trust a verbatim body hit.
_MIN_PREVIEW_BODY_CHARS = 6


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate paired with its match score."""

    candidate: NotificationCandidate
    score: float


def compute_candidate_score(payload: NotificationPayload, candidate: NotificationCandidate) -> float:
    """Score how well one sidebar row explains the notification, in [0, 1]."""

    payload_title = normalize_text(payload.title)
    payload_body = normalize_text(payload.body)
    candidate_title = normalize_text(candidate.title)
    candidate_body = normalize_text(candidate.body)

    payload_title_tokens = tokenize(payload_title)
    payload_body_tokens = tokenize(payload_body)
    candidate_title_tokens = tokenize(candidate_title)
    candidate_body_tokens = tokenize(candidate_body)

    score = 0.0

    if payload_title and candidate_title:
        if payload_title == candidate_title:
            score += WEIGHT_EXACT_TITLE
        elif candidate_title in payload_title or payload_title in candidate_title:
            score += WEIGHT_TITLE_CONTAINS

    score += token_overlap_ratio(payload_title_tokens, candidate_title_tokens) * WEIGHT_TITLE_OVERLAP
    score += token_overlap_ratio(payload_body_tokens, candidate_body_tokens) * WEIGHT_BODY_OVERLAP
    score += token_overlap_ratio(payload_body_tokens, candidate_title_tokens) * WEIGHT_BODY_TITLE_OVERLAP

    # Group chats: the notification title is the sender while the body names the group.
    if (
        payload_body
        and candidate_title
        and payload_title
        and payload_title != candidate_title
        and candidate_title in payload_body
    ):
        score += WEIGHT_BODY_MENTIONS_TITLE

    if candidate_body and payload_title and payload_title in candidate_body:
        score += WEIGHT_PREVIEW_MENTIONS_SENDER

    if not candidate.unread:
        score -= READ_PENALTY

    return clamp_score(score)


def score_candidates(
    payload: NotificationPayload,
    candidates: Iterable[NotificationCandidate],
) -> List[ScoredCandidate]:
    """Return candidates ordered by score, best first; ties keep input order."""

    scored = [
        ScoredCandidate(candidate=candidate, score=compute_candidate_score(payload, candidate))
        for candidate in candidates
    ]
    return sorted(scored, key=lambda item: item.score, reverse=True)


def is_terse_sender_payload(payload: NotificationPayload) -> bool:
    """True when the body carries no text beyond a generic "sent a message"."""

    body = normalize_text(payload.body)
    if not body:
        return True
    return any(pattern.search(body) for pattern in TERSE_SENDER_BODY_PATTERNS)


def _unresolved(confidence: float, reason: str, muted: bool = False) -> NotificationMatchResult:
    return NotificationMatchResult(
        confidence=confidence,
        ambiguous=True,
        muted=muted,
        reason=reason,
    )


def _muted_conflict(confidence: float) -> NotificationMatchResult:
    return _unresolved(confidence, REASON_MUTED_CONFLICT, muted=True)


def _find_muted_alternative_conflict(
    payload: NotificationPayload,
    scored: List[ScoredCandidate],
    config: MatcherConfig,
) -> bool:
    """Detect a muted group that more plausibly owns the notification than top.

    A sender who also has an unmuted 1:1 thread tends to win on score even when
    the message was posted in a muted group, so muted runners-up get a closer
    look before the top row is accepted.
    """

    top = scored[0]
    if top.candidate.muted:
        return False

    payload_title = normalize_text(payload.title)
    payload_body = normalize_text(payload.body)
    top_title = normalize_text(top.candidate.title)
    terse_sender = bool(payload_title) and payload_title == top_title and is_terse_sender_payload(payload)

    for alternative in scored[1:]:
        if not alternative.candidate.muted:
            continue
        alternative_title = normalize_text(alternative.candidate.title)
        alternative_body = normalize_text(alternative.candidate.body)
        if not alternative_title or alternative_title == top_title:
            continue

        explicit_reference = (
            f"in {alternative_title}" in payload_body
            and alternative.score >= config.min_confidence - CROSS_REFERENCE_SLACK
        )
        terse_conflict = (
            terse_sender
            and alternative.score >= config.muted_conflict_score_floor
            and payload_title in alternative_body
        )
        preview_contains_body = (
            len(payload_body) >= _MIN_PREVIEW_BODY_CHARS
            and bool(alternative_body)
            and payload_body in alternative_body
        )
        if explicit_reference or terse_conflict or preview_contains_body:
            return True
    return False


def _cross_reference_conflict(
    payload_title: str,
    payload_body: str,
    defender: ScoredCandidate,
    challenger: ScoredCandidate,
    runner_up_score: float,
    config: MatcherConfig,
) -> bool:
    """True when the body names the challenger's group while the defender is the sender.

    The defender's title equals the payload title (a sender name) and the body
    says "... in <challenger title>", so the sender name may simply collide
    with a 1:1 thread while the message really belongs to the group.
    """

    challenger_title = normalize_text(challenger.candidate.title)
    defender_title = normalize_text(defender.candidate.title)
    if not challenger_title or f"in {challenger_title}" not in payload_body:
        return False
    if defender_title != payload_title:
        return False
    return runner_up_score >= config.min_confidence - CROSS_REFERENCE_SLACK


def resolve_match(
    payload: NotificationPayload,
    candidates: Optional[Iterable[NotificationCandidate]],
    config: Optional[MatcherConfig] = None,
) -> NotificationMatchResult:
    """Pick the conversation a notification belongs to, or explain why not.

    Decision order:
    - no candidates -> "no-candidates"
    - best score under the confidence floor -> "low-confidence"
    - a muted runner-up that the payload points at -> "muted-conflict"
    - body names one of the top two groups while the other is the sender
      -> "ambiguous-candidates" (or "muted-conflict" when the named one is muted)
    - top two closer than the ambiguity delta -> "ambiguous-candidates"
      (or "muted-conflict" when either is muted)
    - otherwise -> "matched"
    """

    config = config or MatcherConfig()
    candidate_list = list(candidates or [])
    if not candidate_list:
        return _unresolved(0.0, REASON_NO_CANDIDATES)

    scored = score_candidates(payload, candidate_list)
    top = scored[0]
    second = scored[1] if len(scored) > 1 else None

    if top.score < config.min_confidence:
        return _unresolved(top.score, REASON_LOW_CONFIDENCE)

    if _find_muted_alternative_conflict(payload, scored, config):
        return _muted_conflict(top.score)

    if second is not None:
        payload_title = normalize_text(payload.title)
        payload_body = normalize_text(payload.body)
        for defender, challenger in ((top, second), (second, top)):
            if _cross_reference_conflict(payload_title, payload_body, defender, challenger, second.score, config):
                if challenger.candidate.muted:
                    return _muted_conflict(top.score)
                return _unresolved(top.score, REASON_AMBIGUOUS)

        if top.score - second.score < config.ambiguity_delta:
            if top.candidate.muted or second.candidate.muted:
                return _muted_conflict(top.score)
            return _unresolved(top.score, REASON_AMBIGUOUS)

    return NotificationMatchResult(
        confidence=top.score,
        ambiguous=False,
        muted=top.candidate.muted,
        reason=REASON_MATCHED,
        matched_href=top.candidate.href,
    )
