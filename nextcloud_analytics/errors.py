class ApiError(Exception):
    """Any failure reported by, or about, the Analytics API."""


class StatusError(ApiError):
    def __init__(self, status: int, body: str):
        super().__init__(f"unexpected status code: {status}\n{body}")
        self.status = status
        self.body = body


class DomainError(ApiError):
    """HTTP 200 with ``success: false``."""

    def __init__(self, api_message: str):
        super().__init__(f"unexpected API response: {api_message}")
        self.api_message = api_message


class MalformedResponseError(ApiError, ValueError):
    def __init__(self, body: str):
        super().__init__(f"API response is not valid JSON: {body[:200]}")
        self.body = body


class ContractError(ApiError):
    """The envelope parsed but lacks the fields the API promises."""

    def __init__(self, reason: str, envelope):
        super().__init__(f"malformed API envelope: {reason}")
        self.envelope = envelope
