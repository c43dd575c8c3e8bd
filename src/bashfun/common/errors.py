class ActionError(Exception):
    """Base class for errors raised by the workflow command helpers."""


class ConfigurationError(ActionError):
    """The runner environment is missing something the action needs.

    Raised for a required input that was not supplied, or for a file command
    whose environment variable or target file is missing.
    """
