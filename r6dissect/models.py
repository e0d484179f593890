"""Replay data model: enumerations, header, players, teams and match updates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any


class _OpenIntEnum(IntEnum):
    """Integer enumeration that accepts values it has no name for."""

    @classmethod
    def _missing_(cls, value: object) -> Any:
        if not isinstance(value, int) or isinstance(value, bool):
            return None
        member = int.__new__(cls, value)
        member._name_ = f"{cls.__name__}({value})"
        member._value_ = value
        return member


class MatchType(_OpenIntEnum):
    QuickMatch = 1
    Ranked = 2
    CustomGameLocal = 3
    CustomGameOnline = 4
    Standard = 8


class GameMode(_OpenIntEnum):
    Bomb = 327933806
    SecureArea = 1983085217
    Hostage = 2838806006
    QuickMatchBomb = 400168582901


class Map(_OpenIntEnum):
    ClubHouse = 837214085
    KafeDostoyevsky = 1378191338
    Kanal = 1460220617
    Yacht = 1767965020
    PresidentialPlane = 2609218856
    ConsulateY7 = 2609221242
    BartlettU = 2697268122
    Coastline = 42090092951
    Tower = 53627213396
    Villa = 88107330328
    Fortress = 126196841359
    HerefordBase = 127951053400
    ThemePark = 199824623654
    Oregon = 231702797556
    House = 237873412352
    Chalet = 259816839773
    Skyscraper = 276279025182
    Border = 305979357167
    Favela = 329867321446
    Bank = 355496559878
    Outback = 362605108559
    EmeraldPlains = 365284490964
    StadiumBravo = 270063334510
    NighthavenLabs = 378595635123
    Consulate = 379218689149
    Lair = 388073319671
    Stadium2020 = 405306299908


class WinCondition(str, Enum):
    KilledOpponents = "KilledOpponents"
    SecuredArea = "SecuredArea"
    DisabledDefuser = "DisabledDefuser"
    DefusedBomb = "DefusedBomb"
    ExtractedHostage = "ExtractedHostage"
    Time = "Time"


class TeamRole(str, Enum):
    Attack = "Attack"
    Defense = "Defense"


class Operator(_OpenIntEnum):
    Recruit = 359656345734
    Castle = 92270642682
    Aruni = 104189664704
    Kaid = 161289666230
    Mozzie = 174977508820
    Pulse = 92270642708
    Ace = 104189664390
    Echo = 92270642214
    Azami = 378305069945
    Solis = 391752120891
    Capitao = 92270644215
    Zofia = 92270644189
    Dokkaebi = 92270644267
    Warden = 104189662920
    Mira = 92270644319
    Sledge = 92270642344
    Melusi = 104189664273
    Bandit = 92270642526
    Valkyrie = 92270642188
    Rook = 92270644059
    Kapkan = 92270641980
    Zero = 291191151607
    Iana = 104189664038
    Ash = 92270642656
    Blackbeard = 92270642136
    Osa = 288200867444
    Thorn = 373711624351
    Jager = 92270642604
    Kali = 104189663920
    Thermite = 92270642760
    Brava = 288200866821
    Amaru = 104189663607
    Ying = 92270642292
    Lesion = 92270642266
    Doc = 92270644007
    Lion = 104189661861
    Fuze = 92270642032
    Smoke = 92270642396
    Vigil = 92270644293
    Mute = 92270642318
    Goyo = 104189663698
    Wamai = 104189663803
    Ela = 92270644163
    Montagne = 92270644033
    Nokk = 104189663024
    Alibi = 104189662071
    Finka = 104189661965
    Caveira = 92270644241
    Nomad = 161289666248
    Thunderbird = 288200867351
    Sens = 384797789346
    IQ = 92270642578
    Blitz = 92270642539
    Hibana = 92270642240
    Maverick = 104189662384
    Flores = 328397386974
    Buck = 92270642474
    Twitch = 92270644111
    Gridlock = 174977508808
    Thatcher = 92270642422
    Glaz = 92270642084
    Jackal = 92270644345
    Grim = 374667788042
    Tachanka = 291437347686
    Oryx = 104189664155
    Frost = 92270642500
    Maestro = 104189662175
    Clash = 104189662280
    Fenrir = 288200867339
    Ram = 395943091136
    Tubarao = 288200867549
    Deimos = 374667787816
    Striker = 409899350463
    Sentry = 409899350403
    Skopos = 386098331713
    Rauora = 386098331923


class MatchUpdateType(_OpenIntEnum):
    Kill = 0
    Death = 1
    DefuserPlantStart = 2
    DefuserPlantComplete = 3
    DefuserDisableStart = 4
    DefuserDisableComplete = 5
    LocateObjective = 6
    OperatorSwap = 7
    Battleye = 8
    PlayerLeave = 9
    Other = 10


_ATTACKERS = (
    Operator.Lion, Operator.Finka, Operator.Maverick, Operator.Nokk, Operator.Amaru,
    Operator.Kali, Operator.Iana, Operator.Ace, Operator.Nomad, Operator.Gridlock,
    Operator.Brava, Operator.Osa, Operator.Zero, Operator.Flores, Operator.Deimos,
    Operator.Grim, Operator.Sens, Operator.Rauora, Operator.Ram, Operator.Striker,
    Operator.Fuze, Operator.Glaz, Operator.Blackbeard, Operator.Hibana, Operator.Ying,
    Operator.Sledge, Operator.Thatcher, Operator.Buck, Operator.Blitz, Operator.IQ,
    Operator.Ash, Operator.Thermite, Operator.Montagne, Operator.Twitch, Operator.Zofia,
    Operator.Capitao, Operator.Dokkaebi, Operator.Jackal,
)

_DEFENDERS = (
    Operator.Alibi, Operator.Maestro, Operator.Clash, Operator.Warden, Operator.Goyo,
    Operator.Wamai, Operator.Oryx, Operator.Melusi, Operator.Aruni, Operator.Kaid,
    Operator.Mozzie, Operator.Fenrir, Operator.Thunderbird, Operator.Tubarao,
    Operator.Tachanka, Operator.Thorn, Operator.Azami, Operator.Skopos, Operator.Solis,
    Operator.Sentry, Operator.Kapkan, Operator.Valkyrie, Operator.Echo, Operator.Lesion,
    Operator.Mute, Operator.Smoke, Operator.Frost, Operator.Bandit, Operator.Jager,
    Operator.Castle, Operator.Pulse, Operator.Doc, Operator.Rook, Operator.Ela,
    Operator.Caveira, Operator.Vigil, Operator.Mira,
)

_OPERATOR_ROLES: dict[int, TeamRole] = {
    **{int(op): TeamRole.Attack for op in _ATTACKERS},
    **{int(op): TeamRole.Defense for op in _DEFENDERS},
}


def operator_role(operator: int) -> TeamRole:
    """Return the side an operator plays on; raise ValueError if it is unknown."""
    try:
        return _OPERATOR_ROLES[int(operator)]
    except KeyError:
        raise ValueError(f"role unknown for operator ID {int(operator)}") from None


def named_id(value: int) -> dict[str, Any]:
    """Serialise an enumerated integer as ``{"name": ..., "id": ...}``."""
    name = value.name if isinstance(value, Enum) else str(int(value))
    return {"name": name, "id": int(value)}


def _format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = ts.isoformat()
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


@dataclass
class Team:
    name: str = ""
    starting_score: int = 0
    score: int = 0
    won: bool = False
    win_condition: WinCondition | None = None
    role: TeamRole | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "startingScore": self.starting_score,
            "score": self.score,
            "won": self.won,
        }
        if self.win_condition:
            out["winCondition"] = self.win_condition.value
        if self.role:
            out["role"] = self.role.value
        return out


@dataclass
class Player:
    id: int = 0
    profile_id: str = ""
    username: str = ""
    team_index: int = 0
    operator: Operator = Operator(0)
    hero_name: int = 0
    alliance: int = 0
    role_image: int = 0
    role_name: str = ""
    role_portrait: int = 0
    spawn: str = ""
    dissect_id: bytes = b""
    ui_id: int = 0

    def __post_init__(self) -> None:
        self.operator = Operator(self.operator)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.id:
            out["id"] = self.id
        if self.profile_id:
            out["profileID"] = self.profile_id
        out["username"] = self.username
        out["teamIndex"] = self.team_index
        out["operator"] = named_id(self.operator)
        if self.hero_name:
            out["heroName"] = self.hero_name
        out["alliance"] = self.alliance
        if self.role_image:
            out["roleImage"] = self.role_image
        if self.role_name:
            out["roleName"] = self.role_name
        if self.role_portrait:
            out["rolePortrait"] = self.role_portrait
        if self.spawn:
            out["spawn"] = self.spawn
        return out


@dataclass
class Header:
    game_version: str = ""
    code_version: int = 0
    timestamp: datetime = datetime(1, 1, 1, tzinfo=timezone.utc)
    match_type: MatchType = MatchType(0)
    map: Map = Map(0)
    site: str = ""
    recording_player_id: int = 0
    recording_profile_id: str = ""
    additional_tags: str = ""
    game_mode: GameMode = GameMode(0)
    rounds_per_match: int = 0
    rounds_per_match_overtime: int = 0
    round_number: int = 0
    overtime_round_number: int = 0
    teams: list[Team] = field(default_factory=lambda: [Team(), Team()])
    players: list[Player] = field(default_factory=list)
    gm_settings: list[int] = field(default_factory=list)
    playlist_category: int = 0
    match_id: str = ""

    def recording_player(self) -> Player:
        """Return the player who recorded the replay, or an empty player."""
        return next(
            (p for p in self.players if p.id == self.recording_player_id), Player()
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "gameVersion": self.game_version,
            "codeVersion": self.code_version,
            "timestamp": _format_timestamp(self.timestamp),
            "matchType": named_id(self.match_type),
            "map": named_id(self.map),
        }
        if self.site:
            out["site"] = self.site
        out["recordingPlayerID"] = self.recording_player_id
        if self.recording_profile_id:
            out["recordingProfileID"] = self.recording_profile_id
        out["additionalTags"] = self.additional_tags
        out["gamemode"] = named_id(self.game_mode)
        out["roundsPerMatch"] = self.rounds_per_match
        out["roundsPerMatchOvertime"] = self.rounds_per_match_overtime
        out["roundNumber"] = self.round_number
        out["overtimeRoundNumber"] = self.overtime_round_number
        out["teams"] = [team.to_dict() for team in self.teams]
        out["players"] = [player.to_dict() for player in self.players]
        out["gmSettings"] = list(self.gm_settings)
        if self.playlist_category:
            out["playlistCategory"] = self.playlist_category
        out["matchID"] = self.match_id
        return out


@dataclass
class MatchUpdate:
    type: MatchUpdateType = MatchUpdateType.Kill
    username: str = ""
    target: str = ""
    headshot: bool | None = None
    time: str = ""
    time_in_seconds: float = 0.0
    message: str = ""
    operator: Operator = Operator(0)
    username_from_scoreboard: str = field(default="", repr=False)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": named_id(self.type)}
        if self.username:
            out["username"] = self.username
        if self.target:
            out["target"] = self.target
        if self.headshot is not None:
            out["headshot"] = self.headshot
        out["time"] = self.time
        out["timeInSeconds"] = self.time_in_seconds
        if self.message:
            out["message"] = self.message
        if self.operator:
            out["operator"] = named_id(self.operator)
        return out