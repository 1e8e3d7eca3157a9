"""Literal command table: canned responses to committed lines."""

from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger(__name__)

HELP_TEXT = (
    "Available commands:\r\n"
    "  help, ?   Show this message\r\n"
    "\r\n"
    "Line editing:\r\n"
    "  Backspace/Delete   Erase the last character\r\n"
    "  Up/Down arrows     Browse command history\r\n"
    "  Ctrl+C, Ctrl+D     Close the connection\r\n"
)


@dataclass
class LiteralCommand:
    """A command that always answers with the same text."""

    name: str
    response: str
    aliases: list[str] = field(default_factory=list)


class CommandRegistry:
    """
    Registry of literal commands.

    Looks up the first word of a committed line by name or alias and
    returns its response bytes.
    """

    def __init__(self) -> None:
        """Initialize empty command registry."""
        self._commands: dict[str, LiteralCommand] = {}
        self._aliases: dict[str, str] = {}  # alias -> command name

    def register(self, command: LiteralCommand) -> None:
        """
        Register a command in the registry.

        Args:
            command: Command to register

        Raises:
            ValueError: If command name or alias already registered
        """
        if not command.name:
            raise ValueError("Command must have a name")

        if command.name in self._commands or command.name in self._aliases:
            raise ValueError(f"Command '{command.name}' already registered")

        for alias in command.aliases:
            if alias in self._aliases or alias in self._commands:
                raise ValueError(f"Alias '{alias}' already registered")

        self._commands[command.name] = command
        for alias in command.aliases:
            self._aliases[alias] = command.name

        logger.debug("command_registered", name=command.name, aliases=command.aliases)

    def get(self, name: str) -> LiteralCommand | None:
        """
        Get a command by name or alias.

        Args:
            name: Command name or alias

        Returns:
            Command if found, None otherwise
        """
        if name in self._commands:
            return self._commands[name]
        if name in self._aliases:
            return self._commands[self._aliases[name]]
        return None

    def respond(self, line: bytes) -> bytes | None:
        """
        Build the response for a committed line.

        Args:
            line: The committed line (ASCII bytes)

        Returns:
            Response bytes, or None for a blank line
        """
        words = line.decode("ascii", errors="replace").split()
        if not words:
            return None

        command_name = words[0].lower()
        command = self.get(command_name)
        if command is None:
            return f"Unknown command: {words[0]}\r\n".encode("ascii", errors="replace")
        return command.response.encode("ascii", errors="replace")

    def __len__(self) -> int:
        return len(self._commands)


def default_registry() -> CommandRegistry:
    """Registry with the built-in commands."""
    registry = CommandRegistry()
    registry.register(LiteralCommand(name="help", response=HELP_TEXT, aliases=["?"]))
    return registry
