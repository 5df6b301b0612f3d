"""
Exception hierarchy for gn2gyp.

Every failure is fatal: a translation that silently papers over an
inconsistency produces a GYP file that builds the wrong thing.
"""


class Gn2GypError(Exception):
    """Base class for all gn2gyp errors."""

    pass


# ============================================================================
# Input / configuration errors
# ============================================================================


class MalformedNameError(Gn2GypError, ValueError):
    """Raised when a GN target name doesn't match //path:name(toolchain)."""

    pass


class UnknownTargetError(Gn2GypError, LookupError):
    """Raised when a target is not present in a build."""

    pass


class UnknownBuildError(UnknownTargetError):
    """Raised when a build name is not present in a project."""

    pass


class MissingRootTargetError(Gn2GypError):
    """Raised when a build has no //:all target to derive its default toolchain from."""

    pass


class SnapshotError(Gn2GypError):
    """Raised when a serialized GN snapshot can't be loaded."""

    pass


class SnapshotFetchError(Gn2GypError):
    """Raised when querying GN for a target description fails."""

    pass


# ============================================================================
# Translation / merge invariant violations
# ============================================================================


class UnrecognizedToolchainError(Gn2GypError):
    """Raised when a GN toolchain has no GYP toolset mapping."""

    pass


class UnexpectedPathError(Gn2GypError, ValueError):
    """Raised when a GN path is neither generated nor source-absolute."""

    pass


class MalformedFlagsError(Gn2GypError, ValueError):
    """Raised when an include flag has no following path."""

    pass


class MissingScriptError(Gn2GypError):
    """Raised when an action target has no script."""

    pass


class DuplicateToolsetError(Gn2GypError):
    """Raised when two fragments for the same target share a toolset."""

    pass


class InconsistentFragmentError(Gn2GypError):
    """Raised when fragments of one target disagree on name or type."""

    pass


class CrossToolsetDependencyMismatchError(Gn2GypError):
    """Raised when a target's dependencies differ between toolsets."""

    pass


class ProxyOutputError(Gn2GypError):
    """Raised when an executable doesn't declare exactly one output."""

    pass


class MisclassifiedTargetError(Gn2GypError):
    """Raised when a target matches zero or several subprojects."""

    pass


class EmptyBuilderError(Gn2GypError):
    """Raised when a target builder is finalized without any fragments."""

    pass


class UnsupportedTargetTypeError(Gn2GypError, NotImplementedError):
    """Raised for GN target types that are recognized but not translated."""

    pass
