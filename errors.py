"""Error types raised while building exercise manifests."""


class ManifestError(Exception):
    """Base class for manifest building failures."""

    pass


class UpstreamError(ManifestError):
    """Raised when a remote source cannot be read."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class UpstreamTransportError(UpstreamError):
    """Network-level failure (DNS, connection refused, reset...)."""

    pass


class UpstreamTimeout(UpstreamError):
    """No response within the fetch timeout."""

    pass


class TooManyRedirects(UpstreamError):
    """Redirect chain exceeded the allowed number of hops."""

    pass


class UpstreamHttpError(UpstreamError):
    """Terminal response had a non-2xx status."""

    def __init__(self, status_code: int, url: str | None = None):
        super().__init__(f"HTTP {status_code} from {url}", url=url)
        self.status_code = status_code


class MissingCredential(ManifestError):
    """Raised when a required API credential is not configured."""

    pass


class ParseError(ManifestError):
    """Raised when CSV or JSON content cannot be parsed."""

    pass


class LocalIoError(ManifestError):
    """Raised when a local file or directory cannot be read."""

    pass
