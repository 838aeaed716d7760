from datetime import timezone
from zoneinfo import ZoneInfo

from votegrid.domain.enums import GridKind, VoteStatus
from votegrid.services.aggregation_service import Aggregate, Vote, aggregate
from votegrid.services.vote_normalizer import event_votes, first_param, normalize_day_votes, normalize_time_votes

TIME_VOTES = [
    {"userId": "u1", "datetime": "2025-08-17T09:00", "status": "preferred"},
    {"userId": "u2", "datetime": "2025-08-17T09:30", "status": "preferred"},
    {"userId": "u3", "datetime": "2025-08-17T15:00", "status": "non-preferred"},
    {"userId": "u4", "datetime": "2025-08-17T18:00", "status": "impossible"},
    {"userId": "u1", "datetime": "2025-08-18T13:00", "status": "preferred"},
    {"userId": "u2", "datetime": "2025-08-18T13:00", "status": "preferred"},
    {"userId": "u3", "datetime": "2025-08-18T13:30", "status": "preferred"},
    {"userId": "u4", "datetime": "2025-08-18T10:30", "status": "impossible"},
]


def test_time_votes_filtered_to_one_date():
    votes = normalize_time_votes(TIME_VOTES, "2025-08-18")
    assert [v.time_key for v in votes] == ["13:00", "13:00", "13:30", "10:30"]
    result = aggregate(votes)
    assert result["13:00"] == Aggregate(preferred=2)
    assert result["10:30"] == Aggregate(impossible=1)


def test_malformed_time_votes_dropped():
    votes = normalize_time_votes(
        [
            {"userId": "u1", "datetime": "2025-08-17T09:10", "status": "preferred"},
            {"userId": "u1", "datetime": "2025-08-17T09:00", "status": "sure"},
            {"datetime": "2025-08-17T09:00", "status": "preferred"},
            ["not", "a", "dict"],
            {"userId": "u2", "datetime": "2025-08-17T09:00", "status": "impossible"},
        ],
        "2025-08-17",
    )
    assert votes == [Vote("u2", "09:00", VoteStatus.IMPOSSIBLE)]


def test_day_votes_from_unix_seconds():
    votes = normalize_day_votes(
        [
            {"uid": 7, "time": 1755388800, "type": "P"},
            {"uid": 8, "time": 1755388800 + 3600, "type": "I"},
            {"uid": 9, "time": "yesterday", "type": "P"},
            {"uid": 9, "date": "2025-08-18", "type": "N"},
        ],
        timezone.utc,
    )
    assert votes == [
        Vote("7", "2025-08-17", VoteStatus.PREFERRED),
        Vote("8", "2025-08-17", VoteStatus.IMPOSSIBLE),
        Vote("9", "2025-08-18", VoteStatus.NON_PREFERRED),
    ]


def test_day_votes_follow_time_zone():
    # 2025-08-16T15:00Z is already the 17th in Seoul
    votes = normalize_day_votes([{"uid": 1, "time": 1755356400, "type": "P"}], ZoneInfo("Asia/Seoul"))
    assert votes[0].time_key == "2025-08-17"


def test_first_param():
    assert first_param("42") == "42"
    assert first_param(["42", "43"]) == "42"
    assert first_param([]) is None
    assert first_param(None) is None


def test_event_votes_split_by_kind():
    event = {"votes": {"day": [{"uid": 1}], "timeVotes": [{"userId": "u"}]}}
    assert event_votes(event, GridKind.DAY) == [{"uid": 1}]
    assert event_votes(event, GridKind.SLOT) == [{"userId": "u"}]


def test_event_votes_flat_list_and_missing():
    flat = {"votes": [{"uid": 1}, {"userId": "u"}]}
    assert event_votes(flat, GridKind.DAY) == flat["votes"]
    assert event_votes(flat, GridKind.SLOT) == flat["votes"]
    assert event_votes({"title": "x"}, GridKind.DAY) == []
    assert event_votes({"dayVotes": [{"uid": 2}]}, GridKind.DAY) == [{"uid": 2}]
    assert event_votes(None, GridKind.SLOT) == []
