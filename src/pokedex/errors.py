class PokedexError(Exception):
    """Base for every failure a query can end in. str(err) is what the user sees."""

    # what the HTTP service answers with when a query ends in this error
    http_status = 502


class NotFoundError(PokedexError):
    http_status = 404

    def __init__(self, query: str):
        self.query = query
        super().__init__("Not found (try another name/ID).")


class HttpStatusError(PokedexError):
    def __init__(self, status: int):
        self.status = status
        super().__init__(f"HTTP {status}")


class NetworkError(PokedexError):
    """The request never produced a response (DNS, refused connection, timeout...)."""


class DecodeError(PokedexError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Malformed response: {detail}")
