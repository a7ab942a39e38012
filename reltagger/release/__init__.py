"""Release flow: trigger guard, version extraction, tagger."""

from reltagger.release.guard import GuardDecision, should_release
from reltagger.release.tagger import ReleaseError, ReleaseResult, ReleaseTagger
from reltagger.release.version import extract_version, write_step_output

__all__ = [
    "GuardDecision",
    "ReleaseError",
    "ReleaseResult",
    "ReleaseTagger",
    "extract_version",
    "should_release",
    "write_step_output",
]
