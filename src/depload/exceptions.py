"""depload exception hierarchy.

All public exceptions inherit from DeploadError, giving callers a single
base class to catch when they want to handle any depload-specific failure
without swallowing unrelated errors.

Readiness failures are not exceptions: a name that never loads simply
never fires its callbacks, and unknown names are reported through the
``on_unknown`` hook of ``ready``/``require``.
"""


class DeploadError(Exception):
    """Base exception for all depload errors."""


class InvalidNameError(DeploadError, ValueError):
    """Raised when a caller-supplied name cannot be used as a readiness key.

    Names starting with the pseudonym marker collide with the reserved
    namespace of unnamed loads, and names containing the topic separator
    cannot be parsed back out of a topic.
    """


class ManifestError(DeploadError):
    """Raised when a dependency manifest cannot be read or parsed.

    Covers missing files, invalid YAML/JSON, and sections of the wrong
    shape (e.g. a dependency list that is neither a string nor a list).
    """


class ResourceError(DeploadError):
    """Raised when a resource backend is misused.

    Covers configuration problems such as starting a remote fetch without
    a running event loop. Failures of the fetch itself are logged by the
    backend and never raised into the engine.
    """
