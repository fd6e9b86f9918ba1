class LoafError(Exception):
    """Base class for LoaF-specific errors."""


# Input side
class InputUnavailableError(LoafError):
    pass


# Envelope / decode side
class EnvelopeFormatError(LoafError):
    pass


class HexDecodeError(LoafError):
    pass


class HexLengthError(HexDecodeError):
    pass


class CompressedStreamError(LoafError):
    pass


class OperationCancelled(Exception):
    """Raised inside the pipeline once a cancellation token has fired.

    Not a LoafError: cancellation is an outcome, not a failure.
    """
