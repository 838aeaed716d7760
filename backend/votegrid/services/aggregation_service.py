"""Vote aggregation.

Reduces ``(participant, time_key, status)`` records into one ``Aggregate`` per
time key. A participant contributes at most one status per key: a later record
for the same pair supersedes the earlier one.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from prometheus_client import Counter

from ..domain.enums import TimeKeyDomain, VoteStatus
from ..domain.time_keys import TimeKey, domain_of, is_valid
from ..infrastructure.observability.logging import log_skipped_vote

VOTES_SKIPPED = Counter(
    "votegrid_votes_skipped_total", "Vote records dropped during aggregation", ["reason"]
)


@dataclass(frozen=True)
class Vote:
    participant_id: str
    time_key: TimeKey
    status: VoteStatus


@dataclass(frozen=True)
class Aggregate:
    preferred: int = 0
    non_preferred: int = 0
    impossible: int = 0

    @property
    def total(self) -> int:
        return self.preferred + self.non_preferred + self.impossible

    def to_dict(self) -> Dict[str, int]:
        return {
            "preferred": self.preferred,
            "nonPreferred": self.non_preferred,
            "impossible": self.impossible,
            "total": self.total,
        }


EMPTY_AGGREGATE = Aggregate()


class InvalidVote(Exception):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


def _field(record: Mapping[str, Any], *names: str):
    for name in names:
        if name in record:
            return record[name]
    return None


def coerce_vote(record: Any) -> Vote:
    """Turn a ``Vote`` or a vote-like mapping into a validated ``Vote``.

    Raises InvalidVote with a short machine-readable reason.
    """
    if isinstance(record, Vote):
        participant, key, raw_status = record.participant_id, record.time_key, record.status
    elif isinstance(record, Mapping):
        participant = _field(record, "participant_id", "participantId", "userId", "uid")
        key = _field(record, "time_key", "timeKey")
        raw_status = _field(record, "status")
    else:
        raise InvalidVote("not_a_record")

    if isinstance(participant, int) and not isinstance(participant, bool):
        participant = str(participant)
    if not isinstance(participant, str) or not participant:
        raise InvalidVote("missing_participant")
    if domain_of(key) is None:
        raise InvalidVote("bad_time_key")
    status = VoteStatus.parse(raw_status)
    if status is None:
        raise InvalidVote("bad_status")
    return Vote(participant, key, status)


def aggregate(votes: Iterable[Any], domain: Optional[TimeKeyDomain] = None) -> Dict[TimeKey, Aggregate]:
    """
    Tally votes per time key.

    Args:
        votes: Vote instances or vote-like mappings; malformed records are skipped.
        domain: Key domain for this run. Inferred from the first valid record when omitted;
            records from the other domain are skipped.

    Returns:
        Mapping of every key with at least one valid vote, sorted by key.
        Missing keys mean ``EMPTY_AGGREGATE`` (see ``lookup``).
    """
    latest: Dict[Tuple[str, TimeKey], VoteStatus] = {}
    for record in votes:
        try:
            vote = coerce_vote(record)
        except InvalidVote as e:
            skip_vote(e.reason, record)
            continue
        if domain is None:
            domain = domain_of(vote.time_key)
        elif not is_valid(vote.time_key, domain):
            skip_vote("mixed_domain", record)
            continue
        latest[(vote.participant_id, vote.time_key)] = vote.status

    counts: Dict[TimeKey, list] = {}
    for (_, key), status in latest.items():
        tally = counts.setdefault(key, [0, 0, 0])
        if status == VoteStatus.PREFERRED:
            tally[0] += 1
        elif status == VoteStatus.NON_PREFERRED:
            tally[1] += 1
        else:
            tally[2] += 1

    return {key: Aggregate(*counts[key]) for key in sorted(counts)}


def lookup(aggregates: Mapping[TimeKey, Aggregate], key: TimeKey) -> Aggregate:
    return aggregates.get(key, EMPTY_AGGREGATE)


def max_preferred_baseline(aggregates: Mapping[TimeKey, Aggregate]) -> int:
    """Highest ``preferred`` count among keys nobody ruled impossible, never below 1."""
    best = 0
    for agg in aggregates.values():
        if agg.impossible == 0:
            best = max(best, agg.preferred)
    return max(best, 1)


def skip_vote(reason: str, record: Any) -> None:
    VOTES_SKIPPED.labels(reason=reason).inc()
    log_skipped_vote(reason, record)
