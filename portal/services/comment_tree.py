"""
Comment thread assembly and comment text parsing.

Comments are stored flat, each carrying an optional ``parent_id``. The
functions here turn such a flat list into a reply forest and pull ``@name``
mentions and ``#word`` tags out of comment bodies. Everything in this module
is pure: no I/O, no shared state, and the caller's objects are never mutated.
"""
import re
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Set

from portal.models.comment import CommentPriority, CommentStatus
from portal.schemas.comment import CommentResponse

# \w is restricted to ASCII letters, digits and underscore
MENTION_PATTERN = re.compile(r"@(\w+)", re.ASCII)
TAG_PATTERN = re.compile(r"#(\w+)", re.ASCII)

SORT_ORDERS = ("newest", "oldest", "priority")

PRIORITY_RANK = {
    CommentPriority.URGENT: 4,
    CommentPriority.HIGH: 3,
    CommentPriority.NORMAL: 2,
    CommentPriority.LOW: 1,
}


def build_tree(comments: Sequence[CommentResponse]) -> List[CommentResponse]:
    """
    Group a flat list of comments into a forest of reply threads.

    Each comment is shallow-copied with a fresh ``replies`` list, so the
    input objects stay untouched and the function can be called repeatedly
    on the same list. Replies keep the order they had in the input.

    A comment becomes a root when it has no ``parent_id`` or when its parent
    is not in ``comments`` (an orphan). A comment naming itself as parent is
    also a root. Longer parent cycles are not detected; their members end
    up nested under each other and are not reachable from any root.

    Args:
        comments: Flat comments in any order

    Returns:
        Root comments in input order, with nested replies
    """
    nodes: Dict[int, CommentResponse] = {
        comment.id: comment.model_copy(update={"replies": []})
        for comment in comments
    }

    roots: List[CommentResponse] = []
    for comment in comments:
        node = nodes[comment.id]
        parent = None
        if comment.parent_id is not None and comment.parent_id != comment.id:
            parent = nodes.get(comment.parent_id)

        if parent is not None:
            parent.replies.append(node)
        else:
            roots.append(node)

    return roots


def _candidate_field(candidate: Any, field: str) -> Any:
    if isinstance(candidate, dict):
        return candidate.get(field)
    return getattr(candidate, field, None)


def extract_mentions(text: str, candidate_users: Iterable[Any]) -> Set[int]:
    """
    Resolve ``@name`` tokens in ``text`` to user IDs.

    Only exact, case-sensitive matches against a candidate's ``name`` count.
    ``candidate_users`` must already be scoped to the users the author is
    allowed to mention; tokens naming anyone else are ignored.
    """
    by_name: Dict[str, int] = {}
    for candidate in candidate_users:
        name = _candidate_field(candidate, "name")
        # First candidate wins when two share a name
        if name is not None and name not in by_name:
            by_name[name] = _candidate_field(candidate, "id")

    return {
        by_name[token]
        for token in MENTION_PATTERN.findall(text)
        if token in by_name
    }


def extract_tags(text: str) -> Set[str]:
    """Return the lower-cased ``#word`` tags found in ``text``."""
    return {token.lower() for token in TAG_PATTERN.findall(text)}


def merge_tags(explicit_tags: Iterable[str], text: str) -> List[str]:
    """
    Combine explicitly chosen tags with the tags found in ``text``.

    Tags are lower-cased and deduplicated; explicit tags come first, then
    tags from the text in the order they appear.
    """
    merged: List[str] = []
    seen: Set[str] = set()
    found = [token.lower() for token in TAG_PATTERN.findall(text)]
    for tag in list(explicit_tags) + found:
        tag = tag.strip().lstrip("#").lower()
        if tag and tag not in seen:
            seen.add(tag)
            merged.append(tag)
    return merged


def _timestamp(comment: CommentResponse) -> float:
    return comment.created_at.timestamp() if comment.created_at else 0.0


def sort_roots(roots: Sequence[CommentResponse], order: str = "newest") -> List[CommentResponse]:
    """
    Sort root comments for display.

    Only the given sequence is reordered; nested replies keep their order.
    ``priority`` puts urgent first and keeps the existing order among equals.
    """
    if order == "oldest":
        return sorted(roots, key=_timestamp)
    if order == "priority":
        return sorted(roots, key=lambda c: PRIORITY_RANK[CommentPriority(c.priority)], reverse=True)
    if order == "newest":
        return sorted(roots, key=_timestamp, reverse=True)
    raise ValueError(f"Unknown sort order: {order}")


def filter_roots_by_status(
    roots: Sequence[CommentResponse],
    status: Optional[str] = None
) -> List[CommentResponse]:
    """Keep root comments with the given status; ``None`` or ``"all"`` keeps all."""
    if status is None or status == "all":
        return list(roots)
    wanted = CommentStatus(status)
    return [root for root in roots if root.status == wanted]


def iter_tree(forest: Iterable[CommentResponse]) -> Iterator[CommentResponse]:
    """Walk every comment in the forest depth-first, parents before replies."""
    stack = list(reversed(list(forest)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.replies))


def strip_replies(comment: CommentResponse) -> Dict[str, Any]:
    """Serialize one comment without its assembled reply subtree."""
    return comment.model_dump(exclude={"replies"})
