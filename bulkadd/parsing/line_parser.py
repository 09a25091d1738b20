"""Turns pasted bulk-add text into ParsedItem records."""

from dataclasses import replace

from bulkadd.logging.logger import Log
from bulkadd.parsing.models import ItemType, ParsedItem, ParseIssue, ParseResult

SUPPORTED_DELIMITERS = ("|", ";")
FORMAT_HINT = "Invalid format. Expected: name; type; location; tags"

_MAX_FIELDS = 4
_DISH_TYPES = frozenset({"dish", "dishes"})
_RESTAURANT_TYPES = frozenset({"", "restaurant", "restaurants"})
# Entity kinds the admin panel knows about but bulk add cannot create.
_REJECTED_TYPES = frozenset(
    {
        "list",
        "lists",
        "city",
        "cities",
        "neighborhood",
        "neighborhoods",
        "hashtag",
        "hashtags",
        "user",
        "users",
        "chain",
        "chains",
    }
)


class LineParser:
    """Parses ``name; type; location; tags`` lines.

    Malformed lines are reported in ``ParseResult.errors`` and never raised,
    so one bad line does not block the rest of the submission.
    """

    def __init__(self, delimiter: str | None = None) -> None:
        if delimiter and delimiter not in SUPPORTED_DELIMITERS:
            raise ValueError(
                f"Unsupported delimiter '{delimiter}'. Choose from: {list(SUPPORTED_DELIMITERS)}"
            )
        self._delimiter = delimiter or None

    def parse(self, raw_input: str) -> ParseResult:
        items: list[ParsedItem] = []
        errors: list[ParseIssue] = []
        for line_number, line in enumerate((raw_input or "").splitlines(), start=1):
            content = line.strip()
            if not content:
                continue
            parsed = self._parse_line(line_number, content)
            if isinstance(parsed, ParseIssue):
                errors.append(parsed)
            else:
                items.append(parsed)
        Log.info(f"Parsed {len(items)} items, {len(errors)} malformed lines")
        return ParseResult(items=items, errors=errors)

    def _parse_line(self, line_number: int, content: str) -> ParsedItem | ParseIssue:
        delimiter = self._delimiter or ("|" if "|" in content else ";")
        fields = [part.strip() for part in content.split(delimiter, _MAX_FIELDS - 1)]

        if len(fields) < 2 or not fields[0]:
            return ParseIssue(line_number=line_number, message=FORMAT_HINT, content=content)

        name, raw_type = fields[0], fields[1]
        item_type = _classify(raw_type)
        if item_type is ItemType.UNKNOWN:
            return ParseIssue(
                line_number=line_number,
                message=f"Unknown type: {raw_type}. Expected 'restaurant' or 'dish'.",
                content=content,
            )

        location = fields[2] if len(fields) > 2 else ""
        tags = _split_tags(fields[3]) if len(fields) > 3 else ()
        return ParsedItem(
            line_number=line_number,
            name=name,
            item_type=item_type,
            location_text=location,
            tags=tags,
        )


def _classify(raw_type: str) -> ItemType:
    normalized = raw_type.strip().lower()
    if normalized in _DISH_TYPES:
        return ItemType.DISH
    if normalized in _REJECTED_TYPES:
        return ItemType.UNKNOWN
    if normalized not in _RESTAURANT_TYPES:
        Log.debug(f"Unrecognized type '{raw_type}', treating as restaurant")
    return ItemType.RESTAURANT


def _split_tags(raw_tags: str) -> tuple[str, ...]:
    return tuple(tag.strip() for tag in raw_tags.split(",") if tag.strip())


def find_local_duplicates(items: list[ParsedItem]) -> list[ParsedItem]:
    """Flag items repeating an earlier line's name and type within one paste.

    Returns a new list; flagged copies carry ``local_duplicate_of``.
    """
    first_seen: dict[tuple[ItemType, str, str], int] = {}
    flagged: list[ParsedItem] = []
    for item in items:
        key = (item.item_type, item.name.casefold(), item.location_text.casefold())
        original_line = first_seen.setdefault(key, item.line_number)
        if original_line != item.line_number:
            Log.warning(
                f"Line {item.line_number} duplicates line {original_line}: {item.name}"
            )
            item = replace(item, local_duplicate_of=original_line)
        flagged.append(item)
    return flagged
