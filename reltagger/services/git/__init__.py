"""Git operations: checkout, identity, tags."""

from reltagger.services.git._run import GitRunnerError
from reltagger.services.git.checkout import checkout_repository, is_working_copy
from reltagger.services.git.identity import configure_identity
from reltagger.services.git.tags import create_annotated_tag, push_tag

__all__ = [
    "GitRunnerError",
    "checkout_repository",
    "configure_identity",
    "create_annotated_tag",
    "is_working_copy",
    "push_tag",
]
