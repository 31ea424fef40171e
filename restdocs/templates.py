"""URI template expansion for restdocs.

This module turns a URI template such as ``/users/{id}/posts/{post_id}`` into a
concrete URI by substituting positional values, supporting:
- Simple placeholders (``{id}``)
- Placeholders with a type or pattern suffix (``{id:int}``, ``{path:path}``),
  where the suffix is ignored during expansion
- Embedded placeholders inside a segment (``v{version}``)
- Placeholders in the authority, query and fragment of absolute templates
"""

import logging
import re
from typing import Any
from urllib.parse import quote

from restdocs.exceptions import InvalidArgumentError, TemplateExpansionError

logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")
_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")

# Characters left unencoded in a substituted value, per URI component.
# Unreserved characters (letters, digits, "_.-~") are always kept by quote().
AUTHORITY_SAFE = "!$&'()*+,;=:@[]"
PATH_SAFE = "/!$&'()*+,;=:@"
QUERY_SAFE = "/?!$'()*,;:@"
FRAGMENT_SAFE = "/?!$&'()*+,;=:@"

# Delimiters that end an authority, plus whitespace
_AUTHORITY_BREAKING = re.compile(r"[/?#\\\s]")


def variable_name(placeholder: str) -> str:
    """Return the variable name of a placeholder body.

    Examples:
        >>> variable_name("id")
        "id"

        >>> variable_name("path:path")
        "path"
    """
    return placeholder.split(":", 1)[0].strip()


def template_variable_names(url_template: str) -> list[str]:
    """List the placeholder names of a template in the order they appear.

    Repeated placeholders are listed once per occurrence since each occurrence
    consumes its own positional value.

    Examples:
        >>> template_variable_names("/users/{id}/posts/{post_id:int}")
        ["id", "post_id"]
    """
    return [
        variable_name(match.group(1))
        for match in PLACEHOLDER_PATTERN.finditer(url_template)
    ]


def _component_boundaries(url_template: str) -> tuple[int, int, int]:
    """Find where the authority ends and where the query and fragment begin.

    Braces are masked first so that a ``?`` or ``#`` inside a placeholder body
    never counts as a delimiter.
    """
    masked = PLACEHOLDER_PATTERN.sub(lambda m: "x" * len(m.group(0)), url_template)
    end = len(masked)

    authority_end = 0
    scheme = _SCHEME_PATTERN.match(masked)
    if scheme:
        authority_end = end
        for delimiter in "/?#":
            index = masked.find(delimiter, scheme.end())
            if index != -1:
                authority_end = min(authority_end, index)

    fragment_start = masked.find("#", authority_end)
    if fragment_start == -1:
        fragment_start = end

    query_start = masked.find("?", authority_end, fragment_start)
    if query_start == -1:
        query_start = fragment_start

    return authority_end, query_start, fragment_start


def encode_value(value: Any, safe: str = PATH_SAFE) -> str:
    """Percent-encode a template value, treating None as an empty string."""
    if value is None:
        return ""
    return quote(str(value), safe=safe)


def expand_template(url_template: str, *uri_variables: Any) -> str:
    """Expand a URI template with positional variable values.

    Each placeholder occurrence consumes the next value, left to right. Values
    are percent-encoded for the URI component they are substituted into while
    the literal text of the template is left untouched. Extra values are
    ignored. Values substituted into the authority of an absolute template
    must not contain "/", "?", "#", "\\" or whitespace.

    Args:
        url_template: The template, e.g. "/users/{id}"
        *uri_variables: Values for the placeholders, in order

    Returns:
        The expanded URI string

    Raises:
        InvalidArgumentError: If url_template is None
        TemplateExpansionError: If there are fewer values than placeholders, or
            an authority value contains one of those characters

    Examples:
        >>> expand_template("/{template}", "t")
        "/t"

        >>> expand_template("/search?q={query}", "a&b")
        "/search?q=a%26b"

        >>> expand_template("/files/{path:path}", "docs/readme.txt")
        "/files/docs/readme.txt"
    """
    if url_template is None:
        raise InvalidArgumentError("URL template must not be None")

    authority_end, query_start, fragment_start = _component_boundaries(url_template)
    values = iter(uri_variables)
    consumed = 0

    def substitute(match: re.Match) -> str:
        nonlocal consumed
        name = variable_name(match.group(1))
        try:
            value = next(values)
        except StopIteration:
            raise TemplateExpansionError(
                f"Not enough variable values available to expand '{name}'",
                template=url_template,
                variable=name,
            ) from None
        consumed += 1

        position = match.start()
        if position < authority_end:
            if value is not None and _AUTHORITY_BREAKING.search(str(value)):
                raise TemplateExpansionError(
                    f"Value {value!r} for '{name}' is not valid in a URI authority",
                    template=url_template,
                    variable=name,
                )
            safe = AUTHORITY_SAFE
        elif position >= fragment_start:
            safe = FRAGMENT_SAFE
        elif position >= query_start:
            safe = QUERY_SAFE
        else:
            safe = PATH_SAFE
        return encode_value(value, safe)

    expanded = PLACEHOLDER_PATTERN.sub(substitute, url_template)

    if consumed < len(uri_variables):
        logger.debug(
            f"Ignoring {len(uri_variables) - consumed} unused value(s) expanding {url_template!r}"
        )

    return expanded
