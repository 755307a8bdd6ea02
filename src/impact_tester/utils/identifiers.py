"""Ticket identifier helpers for Jira reference links"""
import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Path segments that precede the issue key in common tracker URLs
ID_MARKER_SEGMENTS = ("browse", "ticket")


def is_valid_url(url: str) -> bool:
    """
    Check that url is an absolute URL with a scheme and a host.

    Example:
        >>> is_valid_url("https://jira.example.com/browse/PROJ-1")
        True
        >>> is_valid_url("not a url")
        False
    """
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
        # .port raises on a malformed port
        parsed.port
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def extract_ticket_id(url: str) -> str:
    """
    Pull the ticket identifier out of a reference URL.

    Returns the segment following /browse/ or /ticket/, otherwise the last
    path segment. Never raises; invalid URLs give an empty string.

    Example:
        >>> extract_ticket_id("https://jira.example.com/browse/PROJ-123")
        'PROJ-123'
        >>> extract_ticket_id("https://h/x/y")
        'y'
    """
    if not is_valid_url(url):
        logger.warning("Invalid Jira URL provided: %r", url)
        return ""

    segments = urlparse(url.strip()).path.split("/")
    for index, segment in enumerate(segments):
        if segment in ID_MARKER_SEGMENTS:
            if index + 1 < len(segments):
                return segments[index + 1]
            break

    return segments[-1]
