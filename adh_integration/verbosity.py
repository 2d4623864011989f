"""Accept-Verbosity header injection."""
import httpx

VERBOSITY_HEADER = "Accept-Verbosity"

def verbosity_value(verbose: bool) -> str:
    return "verbose" if verbose else "non-verbose"

class VerbosityHeaderHandler:
    """httpx request hook that tells ADH whether to include null values in Data View results.

    `verbose` is the client-wide default, read on every request. A request that
    already carries the header (set per call through DataRequestOptions) keeps it.
    The flag itself is unsynchronized; share one handler only between sequential callers.
    """
    
    def __init__(self, verbose: bool = True):
        self.verbose = verbose
    
    async def __call__(self, request: httpx.Request) -> None:
        if VERBOSITY_HEADER not in request.headers:
            request.headers[VERBOSITY_HEADER] = verbosity_value(self.verbose)
