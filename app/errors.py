class DecisionProxyError(Exception):
    """Base class for failures raised while producing a transaction decision."""


class MissingTextError(DecisionProxyError):
    def __init__(self, message: str = "Missing text"):
        super().__init__(message)


class ConfigurationError(DecisionProxyError):
    pass


class AuthError(DecisionProxyError):
    pass


class ModelGatewayError(DecisionProxyError):
    """Every configured model failed; the message is the last failure reason."""


class ModelOutputError(DecisionProxyError):
    def __init__(self, raw_text: str):
        super().__init__(f"Model output was not valid JSON: {raw_text}")
        self.raw_text = raw_text
