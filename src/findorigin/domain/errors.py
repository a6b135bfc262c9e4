"""Error taxonomy shared by the analysis pipeline and the bot glue."""


class FindOriginError(Exception):
    """Base class for all application errors."""


class AnalysisError(FindOriginError):
    """Any failure that turns an analysis into the unavailable sentinel."""


class ConfigMissingError(AnalysisError):
    """A required credential (such as the AI API key) is not configured."""


class TransportError(AnalysisError):
    """An outbound HTTP call failed or returned a non-2xx status."""


class ParseError(AnalysisError):
    """Model output could not be decoded into an analysis."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text


class ToolExecutionError(AnalysisError):
    """A single tool call requested by the model could not be executed."""


class TelegramAPIError(FindOriginError):
    """The Telegram Bot API rejected a request."""

    def __init__(self, description: str, status_code: int = 0) -> None:
        super().__init__(description)
        self.description = description
        self.status_code = status_code

    @property
    def is_parse_error(self) -> bool:
        """True when Telegram could not parse the message entities."""
        return "parse" in self.description.lower()
