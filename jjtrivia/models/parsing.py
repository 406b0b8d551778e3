"""Parsing result models produced by the game validator."""

from dataclasses import dataclass, field
from enum import Enum


class MessageSeverity(Enum):
    """Severity of a parsing message."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Message(Enum):
    """Fixed set of parsing message kinds with their display templates."""
    PARSING = "Unable to open or parse the game file: {0}"
    MISSING_NAME = "Game name is missing or blank"
    BLANK_CATEGORY_NAME = "Category {0} has a blank name"
    NO_CATEGORIES = "No categories were found"
    NOT_ENOUGH_CATEGORIES = "Not enough categories: found {0}, need at least {1}"
    TOO_MANY_CATEGORIES = "Too many categories: found {0}, at most {1} allowed"
    NO_QUESTIONS = "Category {0} has no questions"
    NOT_ENOUGH_QUESTIONS = "Not enough questions in category {0}: found {1}, need at least {2}"
    TOO_MANY_QUESTIONS = "Too many questions in category {0}: found {1}, at most {2} allowed"
    NOT_MATCHING_QUESTIONS = "Category {0} has {1} questions but category 1 has {2}"
    TOO_FEW_PLAYERS = "Too few players ({0}), at least {1} required; players were ignored"
    TOO_MANY_PLAYERS = "Too many players ({0}), only the first {1} were kept"
    TOO_FEW_BONUS_QUESTIONS = "Too few bonus questions ({0}) for {1} players; bonus questions were ignored"
    QUESTIONS_PARSED = "Parsed {0} questions in {1} categories"
    PLAYERS_PARSED = "Parsed {0} players"
    BONUS_QUESTIONS_PARSED = "Parsed {0} bonus questions"

    def format(self, *args: object) -> str:
        return self.value.format(*args)


@dataclass(frozen=True)
class ParsingMessage:
    """One typed, parameterized message."""
    kind: Message
    severity: MessageSeverity
    args: tuple[object, ...] = ()

    @property
    def text(self) -> str:
        return self.kind.format(*self.args)


@dataclass
class ParsingResult:
    """Outcome of parsing and validating one game file or bundle."""
    file_name: str
    game_data_usable: bool = False
    messages: list[ParsingMessage] = field(default_factory=list)

    def add_error(self, kind: Message, *args: object) -> None:
        self.messages.append(ParsingMessage(kind, MessageSeverity.ERROR, args))

    def add_warning(self, kind: Message, *args: object) -> None:
        self.messages.append(ParsingMessage(kind, MessageSeverity.WARNING, args))

    def add_info(self, kind: Message, *args: object) -> None:
        self.messages.append(ParsingMessage(kind, MessageSeverity.INFO, args))

    def _of(self, severity: MessageSeverity) -> list[ParsingMessage]:
        return [m for m in self.messages if m.severity == severity]

    @property
    def errors(self) -> list[ParsingMessage]:
        return self._of(MessageSeverity.ERROR)

    @property
    def warnings(self) -> list[ParsingMessage]:
        return self._of(MessageSeverity.WARNING)

    @property
    def infos(self) -> list[ParsingMessage]:
        return self._of(MessageSeverity.INFO)

    @property
    def error_messages(self) -> list[str]:
        return [m.text for m in self.errors]

    @property
    def warning_messages(self) -> list[str]:
        return [m.text for m in self.warnings]

    @property
    def info_messages(self) -> list[str]:
        return [m.text for m in self.infos]

    @property
    def title_short(self) -> str:
        return "Success" if self.game_data_usable else "Failure"

    @property
    def title_long(self) -> str:
        if self.game_data_usable:
            return f"Game file {self.file_name} was loaded successfully"
        return f"Game file {self.file_name} could not be loaded"
