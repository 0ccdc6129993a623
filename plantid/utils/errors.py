# utils/errors.py


class PlantIdError(RuntimeError):
    """Base class for every failure of an identification attempt."""

    retryable = True


class ConfigurationError(PlantIdError):
    retryable = False


class EncodingError(PlantIdError):
    retryable = False


class UpstreamError(PlantIdError):
    def __init__(self, status_code, message):
        self.status_code = status_code
        self.upstream_message = message
        super().__init__(self.describe())

    def describe(self):
        return f"API request failed with status {self.status_code}: {self.upstream_message}"


class NetworkError(UpstreamError):
    """The request never got an HTTP response (DNS, refused connection, timeout)."""

    def __init__(self, message):
        super().__init__(None, message)

    def describe(self):
        return f"Could not reach the Gemini API: {self.upstream_message}"


class EmptyResponseError(PlantIdError):
    pass


class MalformedResponseError(PlantIdError):
    pass


class IncompleteDataError(PlantIdError):
    pass
