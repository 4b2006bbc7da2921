class KarmaMotorError(Exception):
    """Base class for errors surfaced as a negative acknowledgement."""
    pass


class InvalidParameter(KarmaMotorError):
    """Request fields are missing, malformed or out of range."""
    pass


class EndpointFault(KarmaMotorError):
    """A collaborator did not answer within its timeout or refused a request."""

    def __init__(self, endpoint: str, verb: str, reason: str = "timeout"):
        super().__init__(f"{endpoint} failed on '{verb}': {reason}")
        self.endpoint = endpoint
        self.verb = verb
        self.reason = reason


class SerializationError(KarmaMotorError):
    """Exception raised for serialization/deserialization issues"""
    pass
