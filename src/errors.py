"""Error types raised by the identification pipeline."""


class EncodingError(Exception):
    """The uploaded image could not be read or re-encoded."""


class InferenceError(Exception):
    """A call to the external model failed or returned nothing usable."""


class MissingCredentialError(RuntimeError):
    """OPENAI_API_KEY is not configured. Not recoverable per call."""
