from typing import Optional

class AnyDealAPIError(Exception):
    """An IsThereAnyDeal call that gave no usable answer.

        The message names the call and what went wrong ("GID status 503"). It never
        holds the request URL, which carries the API key.

        Attributes:
            label (str): Which call failed, e.g. "GID" or "History"
            reason (str): What went wrong, e.g. "status 503" or "timed out"
            status_code (int, optional): Upstream HTTP status when there was a response
    """
    def __init__(self, label: str, reason: str, status_code: Optional[int] = None):
        self.label = label
        self.reason = reason
        self.status_code = status_code
        self.message = f"{label} {reason}"
        super().__init__(self.message)

    @classmethod
    def from_status(cls, label: str, status_code: int) -> 'AnyDealAPIError':
        return cls(label, f"status {status_code}", status_code)
