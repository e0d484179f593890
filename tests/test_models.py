from datetime import datetime, timezone

import pytest

from r6dissect.models import (
    GameMode,
    Header,
    Map,
    MatchType,
    MatchUpdate,
    MatchUpdateType,
    Operator,
    Player,
    Team,
    TeamRole,
    WinCondition,
    named_id,
    operator_role,
)


def test_operator_roles_from_table():
    assert operator_role(Operator.Sledge) is TeamRole.Attack
    assert operator_role(Operator.Castle) is TeamRole.Defense
    assert operator_role(92270644345) is TeamRole.Attack


def test_recruit_has_no_role():
    with pytest.raises(ValueError, match="359656345734"):
        operator_role(Operator.Recruit)


def test_every_operator_but_recruit_has_role():
    for op in Operator:
        if op is Operator.Recruit:
            continue
        assert operator_role(op) in (TeamRole.Attack, TeamRole.Defense)


def test_named_id_of_known_value():
    assert named_id(MatchType.Ranked) == {"name": "Ranked", "id": 2}
    assert named_id(GameMode.Bomb) == {"name": "Bomb", "id": 327933806}


def test_unknown_value_is_accepted():
    unknown = Map(999)
    assert int(unknown) == 999
    assert named_id(unknown) == {"name": "Map(999)", "id": 999}


def test_known_value_lookup_round_trips():
    for m in Map:
        assert Map(int(m)) is m


def test_team_to_dict_omits_empty_fields():
    data = Team(name="Blue", score=3).to_dict()
    assert "winCondition" not in data
    assert "role" not in data
    assert data["name"] == "Blue"
    assert data["score"] == 3


def test_team_to_dict_includes_role_and_condition():
    team = Team(won=True, win_condition=WinCondition.DefusedBomb, role=TeamRole.Attack)
    data = team.to_dict()
    assert data["winCondition"] == "DefusedBomb"
    assert data["role"] == "Attack"
    assert data["won"] is True


def test_player_operator_coerced():
    player = Player(username="alpha", operator=int(Operator.Ash))
    assert player.operator is Operator.Ash
    assert player.to_dict()["operator"] == {"name": "Ash", "id": int(Operator.Ash)}


def test_player_to_dict_hides_internal_ids():
    data = Player(username="alpha", dissect_id=b"\x01\x02\x03\x04", ui_id=7).to_dict()
    assert "dissect_id" not in data
    assert "uiID" not in data
    assert "id" not in data
    assert data["username"] == "alpha"


def test_recording_player_found():
    header = Header(
        recording_player_id=42,
        players=[Player(id=1, username="a"), Player(id=42, username="b")],
    )
    assert header.recording_player().username == "b"


def test_recording_player_missing_gives_empty():
    header = Header(recording_player_id=5, players=[Player(id=1, username="a")])
    assert header.recording_player() == Player()


def test_header_to_dict_timestamp_and_enums():
    header = Header(
        timestamp=datetime(2023, 5, 6, 7, 8, 9),
        match_type=MatchType.Ranked,
        map=Map.Bank,
        game_mode=GameMode.Bomb,
    )
    data = header.to_dict()
    assert data["timestamp"] == "2023-05-06T07:08:09Z"
    assert data["map"]["name"] == "Bank"
    assert data["gamemode"]["id"] == int(GameMode.Bomb)
    assert len(data["teams"]) == 2
    assert "site" not in data


def test_header_default_timestamp_zero():
    assert Header().to_dict()["timestamp"] == "0001-01-01T00:00:00Z"


def test_header_teams_not_shared():
    first, second = Header(), Header()
    first.teams[0].name = "changed"
    assert second.teams[0].name == ""


def test_match_update_to_dict_optional_fields():
    data = MatchUpdate(type=MatchUpdateType.Death, username="x", time="1:00").to_dict()
    assert data["type"] == {"name": "Death", "id": 1}
    assert "headshot" not in data
    assert "operator" not in data
    assert "target" not in data


def test_match_update_headshot_false_kept():
    data = MatchUpdate(headshot=False, operator=Operator.Mira).to_dict()
    assert data["headshot"] is False
    assert data["operator"]["name"] == "Mira"


def test_match_update_hides_scoreboard_username():
    data = MatchUpdate(username="a", username_from_scoreboard="b").to_dict()
    assert "b" not in data.values()
    assert data["username"] == "a"


def test_utc_timestamp_with_zone():
    header = Header(timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    assert header.to_dict()["timestamp"].endswith("Z")