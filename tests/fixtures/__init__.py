"""
Shared test fixtures for the imes library.

Usage:
    from tests.fixtures import (
        PostFilter,
        SAMPLE_POSTS,
        create_event,
        create_post_events,
        create_post_projection,
        create_post_store,
        make_post,
    )
"""

from tests.fixtures.events import (
    POST_EVENT_NAMES,
    PostCreated,
    PostPublished,
    create_event,
    create_post_registry,
)
from tests.fixtures.posts import (
    POST_HANDLERS,
    SAMPLE_POSTS,
    PostFilter,
    create_post_events,
    create_post_projection,
    create_post_store,
    make_post,
    post_filter_predicates,
    post_init_meta,
    post_update_meta,
)

__all__ = [
    # Events
    "POST_EVENT_NAMES",
    "PostCreated",
    "PostPublished",
    "create_event",
    "create_post_registry",
    # Posts
    "POST_HANDLERS",
    "SAMPLE_POSTS",
    "PostFilter",
    "create_post_events",
    "create_post_projection",
    "create_post_store",
    "make_post",
    "post_filter_predicates",
    "post_init_meta",
    "post_update_meta",
]
